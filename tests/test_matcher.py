# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for gitignore-style path matching."""

from pathlib import Path

import pytest

from gemlint.errors import ConfigError
from gemlint.paths.matcher import PathMatcher, PatternSyntaxError, compile_matcher


def test_last_matching_pattern_wins(tmp_path: Path) -> None:
    matcher = PathMatcher.compile(tmp_path, ["*.rs", "!keep.rs"])

    assert matcher.matches(Path("src/lib.rs"))
    assert not matcher.matches(Path("keep.rs"))

    rematched = PathMatcher.compile(tmp_path, ["*.rs", "!keep.rs", "keep.rs"])
    assert rematched.matches(Path("keep.rs"))


def test_no_patterns_match_nothing(tmp_path: Path) -> None:
    matcher = PathMatcher.compile(tmp_path, [])

    assert not matcher.matches(Path("anything.py"))


def test_anchored_pattern_only_matches_at_root(tmp_path: Path) -> None:
    matcher = PathMatcher.compile(tmp_path, ["/build"])

    assert matcher.matches(Path("build"), is_directory=True)
    assert matcher.matches(Path("build/out.o"))
    assert not matcher.matches(Path("src/build/out.o"))


def test_directory_only_pattern(tmp_path: Path) -> None:
    matcher = PathMatcher.compile(tmp_path, ["vendor/"])

    assert matcher.matches(Path("vendor"), is_directory=True)
    assert matcher.matches(Path("vendor/lib.py"))
    assert not matcher.matches(Path("vendor"))


def test_double_star_spans_directories(tmp_path: Path) -> None:
    matcher = PathMatcher.compile(tmp_path, ["docs/**/*.md"])

    assert matcher.matches(Path("docs/guide.md"))
    assert matcher.matches(Path("docs/a/b/guide.md"))
    assert not matcher.matches(Path("src/guide.md"))


def test_absolute_paths_are_made_relative_to_root(tmp_path: Path) -> None:
    matcher = PathMatcher.compile(tmp_path, ["*.py"])

    assert matcher.matches(tmp_path / "pkg" / "mod.py")
    assert not matcher.matches(tmp_path.parent / "elsewhere.py")
    assert not matcher.matches(Path("."))


def test_malformed_pattern_is_a_config_error(tmp_path: Path) -> None:
    with pytest.raises(PatternSyntaxError) as excinfo:
        PathMatcher.compile(tmp_path, ["*.py", "foo\\"])

    assert isinstance(excinfo.value, ConfigError)
    assert excinfo.value.pattern == "foo\\"


def test_compile_matcher_concatenates_sets_in_order(tmp_path: Path) -> None:
    matcher = compile_matcher(tmp_path, ["*.txt"], ["!notes.txt"])

    assert matcher.patterns == ("*.txt", "!notes.txt")
    assert not matcher.matches(Path("notes.txt"))
    assert matcher.matches(Path("todo.txt"))
