# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File selection modes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SelectionKind(str, Enum):
    """Enumerate the ways files can be selected for a run."""

    ALL = "all"
    FROM_EXPLICIT_PATHS = "paths"
    GIT_MODIFIED = "git"
    GIT_STAGED = "staged"
    GIT_STAGED_WITH_STASH = "staged-with-stash"
    GIT_DIFF_FROM = "git-diff-from"


_GIT_KINDS = frozenset(
    {
        SelectionKind.GIT_MODIFIED,
        SelectionKind.GIT_STAGED,
        SelectionKind.GIT_STAGED_WITH_STASH,
        SelectionKind.GIT_DIFF_FROM,
    }
)


@dataclass(frozen=True, slots=True)
class SelectionMode:
    """Active selection mode; ``ref`` is only set for ``GIT_DIFF_FROM``."""

    kind: SelectionKind
    ref: str | None = None

    def __post_init__(self) -> None:
        if self.kind is SelectionKind.GIT_DIFF_FROM and not self.ref:
            raise ValueError("git-diff-from selection requires a ref")
        if self.kind is not SelectionKind.GIT_DIFF_FROM and self.ref is not None:
            raise ValueError(f"{self.kind.value} selection does not take a ref")

    @classmethod
    def all(cls) -> SelectionMode:
        """Select every non-ignored file in the project."""

        return cls(SelectionKind.ALL)

    @classmethod
    def from_explicit_paths(cls) -> SelectionMode:
        """Select the paths given on the command line, expanding directories."""

        return cls(SelectionKind.FROM_EXPLICIT_PATHS)

    @classmethod
    def git_modified(cls) -> SelectionMode:
        """Select tracked files with uncommitted changes."""

        return cls(SelectionKind.GIT_MODIFIED)

    @classmethod
    def git_staged(cls) -> SelectionMode:
        """Select files staged in the index."""

        return cls(SelectionKind.GIT_STAGED)

    @classmethod
    def git_staged_with_stash(cls) -> SelectionMode:
        """Select staged files after stashing unstaged changes."""

        return cls(SelectionKind.GIT_STAGED_WITH_STASH)

    @classmethod
    def git_diff_from(cls, ref: str) -> SelectionMode:
        """Select files changed since ``ref``.

        Args:
            ref: Any revision git understands, such as a branch or commit.

        Returns:
            SelectionMode: A ``GIT_DIFF_FROM`` mode carrying ``ref``.
        """

        return cls(SelectionKind.GIT_DIFF_FROM, ref)

    @property
    def uses_git(self) -> bool:
        """Return whether files come from a git diff, where "no files" is not an error."""

        return self.kind in _GIT_KINDS

    def __str__(self) -> str:
        descriptions = {
            SelectionKind.ALL: "all files in the project",
            SelectionKind.FROM_EXPLICIT_PATHS: "paths passed on the command line (recursively)",
            SelectionKind.GIT_MODIFIED: "modified files according to git",
            SelectionKind.GIT_STAGED: "files staged for a git commit",
            SelectionKind.GIT_STAGED_WITH_STASH: "files staged for a git commit, stashing unstaged content",
        }
        if self.kind is SelectionKind.GIT_DIFF_FROM:
            return f"files modified as compared to {self.ref}"
        return descriptions[self.kind]


__all__ = ["SelectionKind", "SelectionMode"]
