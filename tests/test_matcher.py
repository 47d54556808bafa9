import os
from pathlib import Path

import pytest

from project_structure.matcher import (
    decisive_path_rule,
    decisive_rule,
    is_excluded,
    match_segments,
    normalize_path,
    path_is_directory,
)
from project_structure.rules import compile_rule, compile_rules

BASE = os.path.abspath(os.sep + "project")


def rules(*lines):
    return compile_rules(lines, BASE)


def test_last_match_wins():
    ruleset = rules("*.log", "!keep.log")
    assert not is_excluded(ruleset, "keep.log", False)
    assert is_excluded(ruleset, "debug.log", False)


def test_negation_listed_first_loses():
    ruleset = rules("!keep.log", "*.log")
    assert is_excluded(ruleset, "keep.log", False)


def test_re_exclusion_after_negation():
    ruleset = rules("*.log", "!*.log", "debug.log")
    assert is_excluded(ruleset, "debug.log", False)
    assert not is_excluded(ruleset, "info.log", False)


def test_directory_only_gate():
    ruleset = rules("build/")
    assert is_excluded(ruleset, "build", True)
    assert not is_excluded(ruleset, "build", False)


def test_cross_segment_wildcard():
    ruleset = rules("**/test.txt")
    assert is_excluded(ruleset, "test.txt", False)
    assert is_excluded(ruleset, "a/test.txt", False)
    assert is_excluded(ruleset, "a/b/test.txt", False)
    assert not is_excluded(ruleset, "a/b/other.txt", False)


def test_literal_nested_pattern_matches_only_that_path():
    ruleset = rules("a/test.txt")
    assert is_excluded(ruleset, "a/test.txt", False)
    assert not is_excluded(ruleset, "test.txt", False)
    assert not is_excluded(ruleset, "b/a/test.txt", False)


def test_single_star_does_not_cross_segments():
    assert is_excluded(rules("*.go"), "main.go", False)
    assert not is_excluded(rules("*.go"), "src/main.go", False)
    assert is_excluded(rules("**/*.go"), "main.go", False)
    assert is_excluded(rules("**/*.go"), "src/main.go", False)


def test_exact_pattern():
    ruleset = rules("README.md")
    assert is_excluded(ruleset, "README.md", False)
    assert not is_excluded(ruleset, "docs/README.md", False)


def test_empty_ruleset_excludes_nothing():
    ruleset = rules()
    for path in ["a", "a/b", ".git", "x.log", BASE + "/y"]:
        assert not is_excluded(ruleset, path, True)
        assert not is_excluded(ruleset, path, False)


@pytest.mark.parametrize(
    "pattern, segment, expected",
    [
        ("*", "anything", True),
        ("*", "", True),
        ("*.py", "mod.py", True),
        ("*.py", "mod.pyc", False),
        ("test_*", "test_one", True),
        ("test_*", "one_test", False),
        ("*cache*", "__pycache__", True),
        ("*cache*", "cach", False),
        ("a*b*c", "aXbYc", True),
        ("a*b*c", "aXbY", False),
        ("file?.txt", "file1.txt", True),
        ("file?.txt", "file.txt", False),
        ("file?.txt", "file12.txt", False),
        ("Makefile", "makefile", False),
    ],
)
def test_single_segment_wildcards(pattern, segment, expected):
    rule = compile_rule(pattern)
    assert match_segments(rule, [segment]) is expected


def test_question_mark_pattern_is_wildcard_matched():
    ruleset = rules("data?.csv")
    assert is_excluded(ruleset, "data1.csv", False)
    assert not is_excluded(ruleset, "data?.csv.bak", False)


def test_double_star_in_middle_and_end():
    ruleset = rules("src/**/generated")
    assert is_excluded(ruleset, "src/generated", True)
    assert is_excluded(ruleset, "src/a/b/generated", True)
    assert not is_excluded(ruleset, "lib/generated", True)

    ruleset = rules("logs/**")
    assert is_excluded(ruleset, "logs", True)
    assert is_excluded(ruleset, "logs/2024/app.txt", False)


def test_many_double_stars_terminate():
    ruleset = rules("**/**/**/**/**/**/**/**/z")
    deep = "/".join(["d"] * 40)
    assert not is_excluded(ruleset, deep + "/y", False)
    assert is_excluded(ruleset, deep + "/z", False)


def test_absolute_paths_are_made_relative():
    ruleset = rules("docs/*.md")
    assert is_excluded(ruleset, os.path.join(BASE, "docs", "guide.md"), False)
    assert is_excluded(ruleset, Path(BASE) / "docs" / "guide.md", False)


def test_paths_outside_base_fail_open():
    ruleset = rules("**")
    outside = os.path.join(os.path.dirname(BASE), "elsewhere", "file.txt")
    assert normalize_path(ruleset, outside) is None
    assert not is_excluded(ruleset, outside, False)


def test_relative_paths_are_cleaned():
    ruleset = rules("src/app.py")
    assert normalize_path(ruleset, "./src//app.py") == "src/app.py"
    assert is_excluded(ruleset, "./src//app.py", False)


def test_decisive_rule_reports_the_last_match():
    ruleset = rules("*.log", "!keep.log", "other")
    assert decisive_rule(ruleset, "keep.log", False).source == "!keep.log"
    assert decisive_rule(ruleset, "debug.log", False).source == "*.log"
    assert decisive_rule(ruleset, "main.py", False) is None


def test_verdict_is_deterministic():
    ruleset = rules("**/*.tmp", "!a/**", "a/b/*.tmp")
    first = [is_excluded(ruleset, p, False) for p in ["x.tmp", "a/x.tmp", "a/b/x.tmp"]]
    second = [is_excluded(ruleset, p, False) for p in ["x.tmp", "a/x.tmp", "a/b/x.tmp"]]
    assert first == second == [True, False, True]


def test_decisive_path_rule_uses_the_filesystem(tmp_path: Path):
    (tmp_path / "build").mkdir()
    (tmp_path / "dist").write_text("not a directory")
    ruleset = compile_rules(["build/", "dist/"], tmp_path)
    assert decisive_path_rule(ruleset, "build").source == "build/"
    assert decisive_path_rule(ruleset, tmp_path / "build").source == "build/"
    assert decisive_path_rule(ruleset, "dist") is None


def test_decisive_path_rule_missing_path_fails_open(tmp_path: Path):
    ruleset = compile_rules(["*"], tmp_path)
    assert decisive_path_rule(ruleset, "missing.txt") is None
    assert path_is_directory(ruleset, "missing.txt") is None


def test_very_deep_paths_are_matched_without_error():
    deep = "/".join(["d"] * 1200)
    assert not is_excluded(rules("**/z"), deep + "/y", False)
    assert is_excluded(rules("**/z"), deep + "/z", False)
    assert is_excluded(rules("d/**/d/**"), deep, True)
    assert not is_excluded(rules("**/e/**"), deep, True)
