# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Select the project files a run operates on."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path
from types import TracebackType

from ..constants import VCS_DIRS
from ..errors import SelectionError
from ..vcs.git import GitClient, StashGuard
from .ignore import IgnoreWalker
from .matcher import PathMatcher, compile_matcher
from .mode import SelectionKind, SelectionMode

LOGGER = logging.getLogger(__name__)


class GotPathsWithWrongMode(SelectionError):
    """Raised when paths are passed together with a non-path selection mode."""

    def __init__(self, mode: SelectionMode) -> None:
        """Record the mode that does not accept paths."""

        super().__init__(f"You cannot pass an explicit list of files when looking for {mode}")
        self.mode = mode


class NonExistentPath(SelectionError):
    """Raised when an explicitly requested path does not exist."""

    def __init__(self, path: Path) -> None:
        """Record the missing path as the user gave it."""

        super().__init__(f"You passed a path that does not exist: {path}")
        self.path = path


class AllPathsWereExcluded(SelectionError):
    """Raised when every candidate path was excluded by the configuration."""

    def __init__(self, mode: SelectionMode) -> None:
        """Record the mode that selected nothing."""

        super().__init__(f"All paths were excluded when looking for {mode}")
        self.mode = mode


class PathOutsideProjectRoot(SelectionError):
    """Raised when a selected path does not live under the project root."""

    def __init__(self, path: Path, root: Path) -> None:
        """Record the path and the root it falls outside of.

        Args:
            path: Path as it was given or reported.
            root: Absolute project root.
        """

        super().__init__(f"The path {path} is not under the project root {root}")
        self.path = path
        self.root = root


class CouldNotDetermineRepoRoot(SelectionError):
    """Raised when git cannot report the repository root."""

    def __init__(self, root: Path) -> None:
        """Record the project root git was asked about."""

        super().__init__(f"Could not determine the git repository root for {root}")
        self.root = root


class FileSelector:
    """Compute the sorted file set for one run and own any git stash it makes.

    Use as a context manager: a stash created for
    :meth:`SelectionMode.git_staged_with_stash` is popped on exit, whatever
    happened in between.
    """

    def __init__(
        self,
        mode: SelectionMode,
        project_root: Path,
        *,
        cwd: Path | None = None,
        exclude: Sequence[str] = (),
        git: GitClient | None = None,
    ) -> None:
        """Create a selector.

        Args:
            mode: Active selection mode.
            project_root: Directory all returned paths are relative to.
            cwd: Directory explicit paths are resolved against.
            exclude: Project-level gitignore-style exclusion patterns.
            git: Git client; one rooted at ``project_root`` is created on demand.
        """

        self.mode = mode
        self.project_root = project_root.resolve()
        self.cwd = (cwd or Path.cwd()).resolve()
        self.excluder: PathMatcher = compile_matcher(self.project_root, exclude, VCS_DIRS)
        self._git = git
        self._git_root: Path | None = None
        self._stash: StashGuard | None = None

    def __enter__(self) -> FileSelector:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Restore any stash held by this selector; safe to call repeatedly."""

        if self._stash is not None:
            self._stash.release()
            self._stash = None

    @property
    def git(self) -> GitClient:
        """Return the git client, creating one rooted at the project on first use."""

        if self._git is None:
            self._git = GitClient(self.project_root)
        return self._git

    def select(self, explicit_paths: Iterable[Path] = ()) -> list[Path] | None:
        """Return the project-relative files selected by :attr:`mode`.

        Args:
            explicit_paths: Paths given on the command line, relative to
                :attr:`cwd`. Only valid in ``FROM_EXPLICIT_PATHS`` mode.

        Returns:
            list[Path] | None: Sorted, de-duplicated files. ``None`` means a
            git-based mode found nothing to do.

        Raises:
            GotPathsWithWrongMode: If paths are given outside path mode.
            NonExistentPath: If an explicit path does not exist.
            AllPathsWereExcluded: If a non-git mode selects nothing.
        """

        requested = list(explicit_paths)
        if requested and self.mode.kind is not SelectionKind.FROM_EXPLICIT_PATHS:
            raise GotPathsWithWrongMode(self.mode)

        LOGGER.debug("Selecting %s", self.mode)
        kind = self.mode.kind
        if kind is SelectionKind.ALL:
            files = self._walk_files(self.project_root)
        elif kind is SelectionKind.FROM_EXPLICIT_PATHS:
            files = self._explicit_files(requested)
        elif kind is SelectionKind.GIT_MODIFIED:
            files = self._files_from_git(self.git.modified_files())
        elif self.mode.ref is not None:
            # Only GIT_DIFF_FROM carries a ref.
            files = self._files_from_git(self.git.files_changed_since(self.mode.ref))
        else:
            if kind is SelectionKind.GIT_STAGED_WITH_STASH:
                self._maybe_stash()
            files = self._files_from_git(self.git.staged_files())

        selected = sorted(set(files))
        if selected:
            return selected
        if self.mode.uses_git:
            return None
        raise AllPathsWereExcluded(self.mode)

    def _maybe_stash(self) -> None:
        git_root = self._repo_root()
        if self.git.merge_in_progress(git_root):
            LOGGER.debug("A merge is in progress; not stashing unstaged changes")
            return
        if self._stash is None:
            self._stash = self.git.stash_unstaged()

    def _repo_root(self) -> Path:
        if self._git_root is None:
            root = self.git.repo_root()
            if root is None:
                raise CouldNotDetermineRepoRoot(self.project_root)
            self._git_root = root.resolve()
        return self._git_root

    def relative_to_root(self, path: Path) -> Path:
        """Return ``path`` relative to the project root.

        Args:
            path: Absolute path, or one relative to the current directory.

        Returns:
            Path: Project-relative path; ``Path(".")`` for the root itself.

        Raises:
            PathOutsideProjectRoot: If ``path`` is not under the project root.
        """

        absolute = Path(os.path.normpath(path if path.is_absolute() else self.cwd / path))
        try:
            return absolute.relative_to(self.project_root)
        except ValueError as exc:
            raise PathOutsideProjectRoot(path, self.project_root) from exc

    def _walk_files(self, base: Path) -> list[Path]:
        walker = IgnoreWalker(self.project_root)
        files: list[Path] = []
        for found in walker.walk(base):
            relative = self.relative_to_root(found)
            if not self.excluder.matches(relative):
                files.append(relative)
        return files

    def _explicit_files(self, requested: Sequence[Path]) -> list[Path]:
        LOGGER.debug("Using the list of files passed from the command line")
        files: list[Path] = []
        for rel_to_cwd in requested:
            full = self.cwd / rel_to_cwd
            if not full.exists():
                raise NonExistentPath(rel_to_cwd)
            relative = self.relative_to_root(full)
            if self.excluder.matches(relative, is_directory=full.is_dir()):
                LOGGER.debug("Skipping excluded path %s", relative)
                continue
            if full.is_dir():
                files.extend(self._walk_files(full.resolve()))
            else:
                files.append(relative)
        return files

    def _files_from_git(self, reported: Iterable[str]) -> list[Path]:
        git_root = self._repo_root()
        files: list[Path] = []
        for entry in reported:
            absolute = git_root / entry
            if not absolute.exists():
                LOGGER.debug("The file at %s was deleted so it will be ignored", entry)
                continue
            try:
                relative = self.relative_to_root(absolute)
            except PathOutsideProjectRoot:
                LOGGER.debug("Ignoring %s because it is outside the project root", entry)
                continue
            if self.excluder.matches(relative):
                continue
            files.append(relative)
        return files


__all__ = [
    "AllPathsWereExcluded",
    "CouldNotDetermineRepoRoot",
    "FileSelector",
    "GotPathsWithWrongMode",
    "NonExistentPath",
    "PathOutsideProjectRoot",
]
