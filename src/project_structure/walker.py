"""Depth-first directory walk with rule-based pruning. All comments in English."""

from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from project_structure.matcher import is_excluded
from project_structure.rules import RuleSet


@dataclass(frozen=True)
class Entry:
    """A filesystem entry that survived the ignore rules."""

    path: Path
    relative: str
    is_dir: bool


def walk(root: Path, ruleset: RuleSet) -> Iterator[Entry]:
    """
    Walk 'root' depth-first, yielding every entry that is not excluded.
    Entries are sorted by name within each directory. Excluded directories
    are never descended into. Symlinks are reported but not followed.

    :param root: Directory to walk; it is not yielded itself.
    :param ruleset: Compiled rules, evaluated relative to their own base.
    :raises OSError: If a directory cannot be listed.
    """
    stack = [("", _scan_dir(root.resolve()))]
    while stack:
        prefix, dir_entries = stack[-1]
        dir_entry = next(dir_entries, None)
        if dir_entry is None:
            stack.pop()
            continue

        is_dir = dir_entry.is_dir(follow_symlinks=False)
        path = Path(dir_entry.path)
        if is_excluded(ruleset, path, is_dir):
            continue

        relative = f"{prefix}{dir_entry.name}"
        yield Entry(path=path, relative=relative, is_dir=is_dir)
        if is_dir:
            stack.append((f"{relative}/", _scan_dir(path)))


def _scan_dir(directory: Path) -> Iterator[os.DirEntry[str]]:
    with os.scandir(directory) as it:
        return iter(sorted(it, key=lambda e: e.name))
