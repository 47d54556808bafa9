"""CLI entry point using cyclopts. All comments in English."""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Literal

import cyclopts
import pyperclip

from project_structure.formatter import FORMATTERS
from project_structure.ignore_manager import IGNORE_FILE_NAME, load_rule_set
from project_structure.matcher import decisive_path_rule
from project_structure.rules import RuleFileError, RuleSet
from project_structure.walker import Entry, walk

app = cyclopts.App(
    name="project-structure",
    help="List a project's files, skipping paths matched by .project_structure_ignore.",
)


def _setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )


def _load_rules(root_dir: Path, no_ignore: bool, ignore_file: str) -> RuleSet:
    """
    Load the RuleSet for root_dir, turning a rule file failure into exit status 1.
    """
    try:
        return load_rule_set(root_dir, no_ignore=no_ignore, ignore_file=ignore_file)
    except RuleFileError as e:
        logging.error(f"Error initializing ignore patterns: {e}")
        raise SystemExit(1) from e


def _emit(output: str, stdout: bool, output_file: str | None = None) -> None:
    if output_file is not None:
        try:
            Path(output_file).write_text(output + "\n", encoding="utf-8")
        except OSError as e:
            logging.error(f"Error writing output file {output_file}: {e}")
            raise SystemExit(1) from e
        logging.info(f"Output has been written to {output_file}")
        return
    if stdout:
        print(output)
        return
    try:
        pyperclip.copy(output)
        logging.info("Output has been copied to clipboard.")
    except pyperclip.PyperclipException as e:
        logging.warning(f"Clipboard is not available ({e}). Printing to stdout.")
        print(output)


def _read_file_content(path: Path) -> str | None:
    """
    Read the entire content of a text file.
    Returns None (after a warning) when the file cannot be read.
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        logging.warning(f"Could not read file {path}: {e}")
        return None


def _format_contents(entries: list[Entry], format_: str) -> str:
    formatter = FORMATTERS[format_]()
    blocks = []
    for entry in entries:
        content = _read_file_content(entry.path)
        if content is not None:
            blocks.append(formatter.format_text_file(entry.relative, content))
    return formatter.format_report(blocks)


@app.command(name="list")
def list_paths(
    directory: str = ".",
    *,
    stdout: bool = False,
    output: str | None = None,
    dirs: bool = False,
    contents: bool = False,
    format_: Literal["tagged", "markdown"] = "tagged",
    no_ignore: bool = False,
    ignore_file: str = IGNORE_FILE_NAME,
) -> None:
    """
    Walk DIRECTORY and output the relative paths that are not ignored,
    or with --contents, the contents of every file that is not ignored.

    Parameters
    ----------
    directory
        Project root to walk.
    stdout
        Print to stdout instead of copying to the clipboard.
    output
        Write the output to this file instead.
    dirs
        Include directories in the path listing, with a trailing '/'.
    contents
        Output each file's contents instead of the path listing.
    format_
        Layout of the --contents report.
    no_ignore
        Do not load or apply any ignore rules.
    ignore_file
        Name of the rule file inside DIRECTORY.
    """
    _setup_logging()
    root_dir = Path(directory)
    if not root_dir.is_dir():
        logging.error(f"Not a directory: {root_dir}")
        raise SystemExit(1)

    ruleset = _load_rules(root_dir, no_ignore, ignore_file)

    try:
        entries = list(walk(root_dir, ruleset))
    except OSError as e:
        logging.error(f"Error walking {root_dir}: {e}")
        raise SystemExit(1) from e

    files = [entry for entry in entries if not entry.is_dir]
    if not files:
        logging.info("No files left after applying ignore rules.")
        return

    if contents:
        _emit(_format_contents(files, format_), stdout, output)
        return

    lines = [
        f"{entry.relative}/" if entry.is_dir else entry.relative
        for entry in entries
        if dirs or not entry.is_dir
    ]
    _emit("\n".join(lines), stdout, output)


@app.command
def check(
    *paths: str,
    directory: str = ".",
    verbose: bool = False,
    no_ignore: bool = False,
    ignore_file: str = IGNORE_FILE_NAME,
) -> None:
    """
    Report whether each PATH is excluded by the rules of DIRECTORY.

    Parameters
    ----------
    paths
        Paths to check, absolute or relative to DIRECTORY.
    directory
        Project root holding the rule file.
    verbose
        Show the rule that decided each verdict and debug diagnostics.
    no_ignore
        Do not load or apply any ignore rules.
    ignore_file
        Name of the rule file inside DIRECTORY.
    """
    _setup_logging(verbose)
    root_dir = Path(directory)
    ruleset = _load_rules(root_dir, no_ignore, ignore_file)

    for path in paths:
        rule = decisive_path_rule(ruleset, path)
        excluded = rule is not None and not rule.negated
        line = f"{'excluded' if excluded else 'included'}: {path}"
        if verbose and rule is not None:
            line += f"  ({rule.source})"
        print(line)


def main():
    app()


if __name__ == "__main__":
    main()
