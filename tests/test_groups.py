# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for grouping files by directory."""

from pathlib import Path

from gemlint.paths.groups import Group, make_groups


def test_groups_partition_files_by_parent() -> None:
    files = [Path("b/z.py"), Path("top.py"), Path("a/y.py"), Path("a/x.py")]

    groups = make_groups(files)

    assert groups == [
        Group(Path("."), (Path("top.py"),)),
        Group(Path("a"), (Path("a/x.py"), Path("a/y.py"))),
        Group(Path("b"), (Path("b/z.py"),)),
    ]
    members = [file for group in groups for file in group.files]
    assert sorted(members) == sorted(files)
    assert len({group.directory for group in groups}) == len(groups)


def test_duplicate_files_appear_once() -> None:
    groups = make_groups([Path("a/x.py"), Path("a/x.py")])

    assert groups == [Group(Path("a"), (Path("a/x.py"),))]


def test_empty_selection_has_no_groups() -> None:
    assert make_groups([]) == []
