# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the ignore-file aware directory walk."""

from __future__ import annotations

from pathlib import Path

from gemlint.paths.ignore import IgnoreFile, IgnoreWalker


def _walked(root: Path, base: Path | None = None) -> set[str]:
    return {path.relative_to(root).as_posix() for path in IgnoreWalker(root).walk(base)}


def test_ignore_file_applies_outside_git(tmp_path: Path, write_files) -> None:
    write_files(tmp_path, {".ignore": "*.log\n", "a.log": "", "b.txt": ""})

    assert _walked(tmp_path) == {".ignore", "b.txt"}


def test_gitignore_only_applies_inside_a_work_tree(tmp_path: Path, write_files) -> None:
    write_files(tmp_path, {".gitignore": "*.txt\n", "notes.txt": ""})

    assert "notes.txt" in _walked(tmp_path)

    (tmp_path / ".git").mkdir()
    assert "notes.txt" not in _walked(tmp_path)


def test_vcs_directories_and_ignored_directories_are_pruned(tmp_path: Path, write_files) -> None:
    write_files(
        tmp_path,
        {
            ".git/config": "",
            ".hg/store": "",
            ".gitignore": "build/\n",
            "build/out.o": "",
            "src/.hidden.py": "",
            "src/main.py": "",
        },
    )

    assert _walked(tmp_path) == {".gitignore", "src/.hidden.py", "src/main.py"}


def test_ignore_beats_gitignore_in_the_same_directory(tmp_path: Path, write_files) -> None:
    write_files(
        tmp_path,
        {
            ".git/HEAD": "",
            ".gitignore": "*.gen\n",
            ".ignore": "!keep.gen\n",
            "keep.gen": "",
            "other.gen": "",
        },
    )

    walked = _walked(tmp_path)

    assert "keep.gen" in walked
    assert "other.gen" not in walked


def test_nested_ignore_file_overrides_parent(tmp_path: Path, write_files) -> None:
    write_files(
        tmp_path,
        {
            ".git/HEAD": "",
            ".gitignore": "*.gen\n",
            "sub/.gitignore": "!*.gen\n",
            "top.gen": "",
            "sub/inner.gen": "",
        },
    )

    walked = _walked(tmp_path)

    assert "sub/inner.gen" in walked
    assert "top.gen" not in walked


def test_git_info_exclude_is_honoured(tmp_path: Path, write_files) -> None:
    write_files(tmp_path, {".git/info/exclude": "secret.txt\n", "secret.txt": "", "public.txt": ""})

    walked = _walked(tmp_path)

    assert walked == {"public.txt"}


def test_walking_a_subdirectory_inherits_ancestor_rules(tmp_path: Path, write_files) -> None:
    write_files(tmp_path, {".ignore": "*.tmp\n", "sub/a.tmp": "", "sub/a.py": ""})

    assert _walked(tmp_path, tmp_path / "sub") == {"sub/a.py"}


def test_walking_an_ignored_directory_keeps_its_other_rules(tmp_path: Path, write_files) -> None:
    write_files(
        tmp_path,
        {".ignore": "build/\n*.tmp\n", "build/gen/out.py": "", "build/gen/out.tmp": "", "build/top.py": ""},
    )

    assert "build/top.py" not in _walked(tmp_path)
    assert _walked(tmp_path, tmp_path / "build") == {"build/gen/out.py", "build/top.py"}
    assert _walked(tmp_path, tmp_path / "build" / "gen") == {"build/gen/out.py"}


def test_released_rules_drop_only_patterns_matching_the_start(tmp_path: Path) -> None:
    source = tmp_path / ".ignore"
    source.write_text("build\n*.tmp\n", encoding="utf-8")
    loaded = IgnoreFile.load(source, tmp_path)
    assert loaded is not None

    released = loaded.released_for(tmp_path / "build")

    assert released.decide(tmp_path / "build" / "a.py", is_directory=False) is None
    assert released.decide(tmp_path / "build" / "a.tmp", is_directory=False) is True
    assert loaded.released_for(tmp_path / "src") is loaded


def test_ignore_file_without_patterns_is_skipped(tmp_path: Path) -> None:
    source = tmp_path / ".ignore"
    source.write_text("# only a comment\n\n", encoding="utf-8")

    assert IgnoreFile.load(source, tmp_path) is None


def test_invalid_lines_are_skipped(tmp_path: Path) -> None:
    source = tmp_path / ".ignore"
    source.write_text("foo\\\n*.log\n", encoding="utf-8")

    loaded = IgnoreFile.load(source, tmp_path)

    assert loaded is not None
    assert loaded.decide(tmp_path / "x.log", is_directory=False) is True
    assert loaded.decide(tmp_path / "x.py", is_directory=False) is None
