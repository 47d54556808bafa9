"""Ignore manager for project-structure.
All comments in English.

This module handles:
- Loading the default ignore rules from 'default_ignores.txt'.
- Loading project rules from '.project_structure_ignore' in the target directory,
  creating an empty one when it does not exist yet.
- Compiling both into a single RuleSet, defaults first.

If --no-ignore is given, no rules are used at all.
"""

from __future__ import annotations

import logging
from pathlib import Path

from project_structure.rules import (
    RuleFileError,
    RuleSet,
    compile_file,
    compile_rules,
    read_rule_lines,
)

IGNORE_FILE_NAME = ".project_structure_ignore"
DEFAULT_IGNORES = Path(__file__).parent / "default_ignores.txt"


def ensure_ignore_file(root_dir: Path, name: str = IGNORE_FILE_NAME) -> Path:
    """
    Make sure the project rule file exists, creating it empty if needed.

    :param root_dir: Directory the rule file belongs to.
    :param name: File name of the rule file.
    :return: Path of the rule file.
    :raises RuleFileError: If the file is missing and cannot be created.
    """
    ignore_file = root_dir / name
    if ignore_file.exists():
        return ignore_file
    try:
        ignore_file.touch()
    except OSError as e:
        raise RuleFileError(f"Error creating file {ignore_file}: {e}") from e
    logging.info(f"Created empty rule file: {ignore_file}")
    return ignore_file


def load_rule_set(
    root_dir: Path, no_ignore: bool = False, ignore_file: str = IGNORE_FILE_NAME
) -> RuleSet:
    """
    Build the RuleSet used for a walk of root_dir: the default_ignores.txt
    resource first, then the project rule file, so project rules override
    the defaults. The rule file itself is always ignored, whatever its name.

    :param root_dir: Directory being walked; also the RuleSet base.
    :param no_ignore: If True, do not load, create, or apply any rules.
    :param ignore_file: File name of the project rule file.
    :return: Compiled rules anchored at the resolved root_dir.
    :raises RuleFileError: If a rule file cannot be read or created.
    """
    base = root_dir.resolve()
    if no_ignore:
        return compile_rules([], base)

    # 1) Default rules (internal resource).
    ruleset = compile_file(DEFAULT_IGNORES, base)

    # 2) Project rules, created empty on first use.
    user_ignore = ensure_ignore_file(base, ignore_file)
    ruleset = ruleset.extend([ignore_file, *read_rule_lines(user_ignore)])
    logging.info(f"Using rule file: {user_ignore}")
    logging.info(f"Compiled {len(ruleset)} ignore rule(s)")
    return ruleset
