"""Rule compilation for project-structure ignore files. All comments in English.

A rule file holds one gitignore-like pattern per line. This module turns
those lines into an ordered, immutable RuleSet that the matcher consumes.
"""

from __future__ import annotations
import logging
import os
import posixpath
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

DOUBLE_STAR = "**"


class RuleFileError(Exception):
    """Raised when a rule file exists but cannot be read or created."""


@dataclass(frozen=True)
class Rule:
    """
    One compiled pattern line.

    :param source: The trimmed line as it appeared in the rule file.
    :param negated: True when the line started with '!'.
    :param directory_only: True when the line ended with '/'.
    :param segments: The pattern split on '/'; '**' segments are kept atomic.
    :param exact: True when the pattern holds neither '*' nor '?'.
    """

    source: str
    negated: bool
    directory_only: bool
    segments: tuple[str, ...]
    exact: bool
    matchers: tuple[re.Pattern[str] | None, ...] = field(repr=False, compare=False)

    @property
    def pattern(self) -> str:
        return "/".join(self.segments)


@dataclass(frozen=True)
class RuleSet:
    """Ordered rules plus the base directory that candidate paths are relative to."""

    rules: tuple[Rule, ...]
    base: str

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def extend(self, lines: Iterable[str]) -> RuleSet:
        """
        Return a new RuleSet with the rules compiled from 'lines' appended.
        Appended rules come later in file order, so they win on a match.
        """
        extra = compile_rules(lines, self.base)
        return RuleSet(self.rules + extra.rules, self.base)


def _segment_matcher(segment: str) -> re.Pattern[str] | None:
    """
    Build an anchored regex for one pattern segment.
    '*' is any run of characters inside the segment, '?' exactly one.
    Returns None for the cross-segment wildcard.
    """
    if segment == DOUBLE_STAR:
        return None
    parts = []
    for char in segment:
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def _clean_pattern(pattern: str) -> str:
    # Every pattern is anchored at the base directory already.
    pattern = pattern.replace(os.sep, "/").lstrip("/")
    if not pattern:
        return ""
    return posixpath.normpath(pattern)


def compile_rule(line: str) -> Rule | None:
    """
    Compile a single line into a Rule.
    Returns None for blank lines, comments, and patterns that reduce to nothing.

    :param line: Raw line from a rule file.
    :return: The compiled Rule or None.
    """
    source = line.strip()
    if not source or source.startswith("#"):
        return None

    pattern = source
    negated = pattern.startswith("!")
    if negated:
        pattern = pattern[1:]
    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    pattern = _clean_pattern(pattern)
    if not pattern or pattern == ".":
        logger.debug(f"Skipping empty pattern: {source!r}")
        return None

    segments = tuple(pattern.split("/"))
    return Rule(
        source=source,
        negated=negated,
        directory_only=directory_only,
        segments=segments,
        exact="*" not in pattern and "?" not in pattern,
        matchers=tuple(_segment_matcher(s) for s in segments),
    )


def compile_rules(lines: Iterable[str], base: str | os.PathLike[str]) -> RuleSet:
    """
    Compile rule lines into a RuleSet, preserving their order.

    :param lines: Lines of gitignore-like syntax.
    :param base: Directory that absolute candidate paths are made relative to.
    :return: An immutable RuleSet; empty input gives a RuleSet that excludes nothing.
    """
    rules = []
    for line in lines:
        rule = compile_rule(line)
        if rule is not None:
            rules.append(rule)
    return RuleSet(tuple(rules), os.fspath(base))


def read_rule_lines(path: Path) -> list[str]:
    """
    Read the lines of a UTF-8 rule file, dropping a leading byte order mark.
    Only line breaks end a line; other control characters stay in the rule.
    Any I/O failure is surfaced as a RuleFileError.
    """
    try:
        with path.open("r", encoding="utf-8-sig") as f:
            return [line.rstrip("\r\n") for line in f]
    except (OSError, UnicodeDecodeError) as e:
        raise RuleFileError(f"Error reading rule file {path}: {e}") from e


def compile_file(path: str | os.PathLike[str], base: str | os.PathLike[str]) -> RuleSet:
    """
    Read and compile a rule file.

    :param path: Location of the rule file.
    :param base: Base directory for relative path resolution.
    :return: The compiled RuleSet.
    :raises RuleFileError: If the file cannot be read.
    """
    ruleset = compile_rules(read_rule_lines(Path(path)), base)
    logger.info(f"Loaded {len(ruleset)} rule(s) from {path}")
    return ruleset
