"""Path matching against a compiled RuleSet. All comments in English.

Evaluation is last-match-wins: every rule is tried in file order and the
last one that matches decides the verdict. Matching never raises; paths
that cannot be resolved are treated as not excluded.
"""

from __future__ import annotations
import logging
import os
import posixpath
import stat

from project_structure.rules import DOUBLE_STAR, Rule, RuleSet

logger = logging.getLogger(__name__)


def normalize_path(ruleset: RuleSet, path: str | os.PathLike[str]) -> str | None:
    """
    Express 'path' as a clean, slash-separated path relative to the RuleSet base.
    Returns None when no relative form exists.
    """
    try:
        path = os.fspath(path)
        if os.path.isabs(path):
            path = os.path.relpath(path, ruleset.base)
    except (TypeError, ValueError) as e:
        logger.debug(f"Cannot resolve {path!r} against {ruleset.base!r}: {e}")
        return None
    rel_path = posixpath.normpath(path.replace(os.sep, "/"))
    if rel_path == ".." or rel_path.startswith("../"):
        logger.debug(f"{path!r} lies outside {ruleset.base!r}")
        return None
    return rel_path


def match_segments(rule: Rule, path_segments: list[str] | tuple[str, ...]) -> bool:
    """
    Match the rule's segments against path segments.
    '**' absorbs zero or more whole path segments; every other segment must
    match exactly one path segment.

    The table is filled from the last pattern segment backwards; row[j] tells
    whether pattern segments i: match path segments j:.
    """
    segments = rule.segments
    matchers = rule.matchers
    n_path = len(path_segments)

    # Exhausted pattern matches only an exhausted path.
    next_row = [False] * n_path + [True]
    for i in range(len(segments) - 1, -1, -1):
        row = [False] * (n_path + 1)
        if segments[i] == DOUBLE_STAR:
            row[n_path] = next_row[n_path]
            for j in range(n_path - 1, -1, -1):
                row[j] = next_row[j] or row[j + 1]
        else:
            for j in range(n_path):
                row[j] = next_row[j + 1] and matchers[i].fullmatch(path_segments[j]) is not None
        next_row = row
    return next_row[0]


def rule_matches(rule: Rule, path: str, is_directory: bool) -> bool:
    """
    Check a single rule against an already normalized relative path.

    :param rule: Compiled rule.
    :param path: Slash-separated path relative to the RuleSet base.
    :param is_directory: Whether the path names a directory.
    :return: True if the rule applies to the path.
    """
    if rule.directory_only and not is_directory:
        return False
    if rule.exact:
        return rule.pattern == path
    return match_segments(rule, path.split("/"))


def decisive_rule(
    ruleset: RuleSet, path: str | os.PathLike[str], is_directory: bool
) -> Rule | None:
    """
    Return the last rule that matches 'path', or None if none does.
    The returned rule decides the verdict: excluded unless it is negated.
    """
    rel_path = normalize_path(ruleset, path)
    if rel_path is None:
        return None

    decided = None
    for rule in ruleset.rules:
        if rule_matches(rule, rel_path, is_directory):
            decided = rule
    return decided


def is_excluded(
    ruleset: RuleSet, path: str | os.PathLike[str], is_directory: bool
) -> bool:
    """
    Decide whether 'path' is excluded by the RuleSet.

    :param ruleset: Compiled rules.
    :param path: Absolute path, or path relative to the RuleSet base.
    :param is_directory: Whether the path names a directory; directory-only
        rules never match files.
    :return: True if the last matching rule is not a negation.
    """
    rule = decisive_rule(ruleset, path, is_directory)
    return rule is not None and not rule.negated


def path_is_directory(ruleset: RuleSet, path: str | os.PathLike[str]) -> bool | None:
    """
    Inspect 'path' (relative paths are taken from the RuleSet base) without
    following symlinks. Returns None when the path cannot be inspected.
    """
    full_path = os.path.join(ruleset.base, os.fspath(path))
    try:
        info = os.lstat(full_path)
    except (OSError, ValueError) as e:
        logger.debug(f"Cannot stat {full_path}: {e}")
        return None
    return stat.S_ISDIR(info.st_mode)


def decisive_path_rule(ruleset: RuleSet, path: str | os.PathLike[str]) -> Rule | None:
    """
    Like decisive_rule, but finds the directory flag by inspecting the filesystem.
    A path that cannot be inspected matches no rule, so it is not excluded.
    """
    if not ruleset.rules:
        return None
    is_directory = path_is_directory(ruleset, path)
    if is_directory is None:
        return None
    return decisive_rule(ruleset, path, is_directory)
