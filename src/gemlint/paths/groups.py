# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Partition selected files by parent directory."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Group:
    """Files sharing one parent directory. ``Path(".")`` is the project root."""

    directory: Path
    files: tuple[Path, ...]


def make_groups(files: Iterable[Path]) -> list[Group]:
    """Group ``files`` by their direct parent directory.

    Args:
        files: Project-relative file paths.

    Returns:
        list[Group]: Groups sorted by directory, each with sorted files.
    """

    by_directory: defaultdict[Path, set[Path]] = defaultdict(set)
    for file in files:
        by_directory[file.parent].add(file)
    return [Group(directory=directory, files=tuple(sorted(members))) for directory, members in sorted(by_directory.items())]


__all__ = ["Group", "make_groups"]
