# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Thin git client used for change-based file selection."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from types import TracebackType
from typing import Final

from ..execution.process import MATCH_ANY_STDERR, ExecError, ExecRequest, run_process

LOGGER = logging.getLogger(__name__)

GitRunner = Callable[[Sequence[str], Path], str]

_NO_CHANGES_MARKER: Final[str] = "No local changes to save"


def _default_runner(args: Sequence[str], cwd: Path) -> str:
    """Execute ``git`` with ``args`` in ``cwd`` and return stdout.

    Args:
        args: Git sub-command and arguments.
        cwd: Working directory for the command.

    Returns:
        str: Captured standard output (empty when git printed nothing).

    Raises:
        ExecError: If git is missing or exits non-zero.
    """

    # git routinely writes hints and progress to stderr.
    output = run_process(ExecRequest(exe="git", args=tuple(args), ignore_stderr=(MATCH_ANY_STDERR,), in_dir=cwd))
    return output.stdout or ""


def _split_lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


class GitClient:
    """Issue the handful of git operations needed to select files."""

    def __init__(self, cwd: Path, *, runner: GitRunner | None = None) -> None:
        """Create a client rooted at ``cwd``.

        Args:
            cwd: Directory git commands are executed from.
            runner: Optional command runner, mainly for tests. Defaults to a
                runner backed by :func:`run_process`.
        """

        self.cwd = cwd
        self._runner = runner or _default_runner

    def _run(self, *args: str) -> str:
        return self._runner(args, self.cwd)

    def repo_root(self) -> Path | None:
        """Return the top level of the repository, or ``None`` outside one."""

        try:
            lines = _split_lines(self._run("rev-parse", "--show-toplevel"))
        except ExecError as exc:
            LOGGER.debug("Could not determine the git repository root: %s", exc)
            return None
        return Path(lines[0]) if lines else None

    def modified_files(self) -> list[str]:
        """Return added, copied or modified tracked files relative to the repo root."""

        return _split_lines(self._run("diff", "--name-only", "--diff-filter=ACM", "HEAD"))

    def staged_files(self) -> list[str]:
        """Return files staged in the index relative to the repo root."""

        return _split_lines(self._run("diff", "--cached", "--name-only", "--diff-filter=ACM"))

    def files_changed_since(self, ref: str) -> list[str]:
        """Return files changed between the merge base of ``ref`` and ``HEAD``.

        Args:
            ref: Commit, branch or tag to compare against.

        Returns:
            list[str]: Repository-relative paths.
        """

        return _split_lines(self._run("diff", "--name-only", "--diff-filter=ACM", f"{ref}..."))

    def merge_in_progress(self, repo_root: Path) -> bool:
        """Return whether an unresolved merge is in progress in ``repo_root``."""

        return (repo_root / ".git" / "MERGE_MODE").exists()

    def stash_unstaged(self) -> StashGuard:
        """Stash unstaged changes while keeping the index intact.

        Returns:
            StashGuard: Guard that pops the stash when released. The guard is
            inert when git reported nothing to stash.
        """

        output = self._run("stash", "--keep-index")
        stashed = _NO_CHANGES_MARKER not in output
        if stashed:
            LOGGER.debug("Stashed unstaged changes")
        else:
            LOGGER.debug("No unstaged changes to stash")
        return StashGuard(self, active=stashed)

    def pop_stash(self) -> None:
        """Restore the most recent stash entry."""

        self._run("stash", "pop")


class StashGuard:
    """Scoped owner of a git stash that restores it exactly once."""

    def __init__(self, client: GitClient, *, active: bool) -> None:
        """Bind the guard to ``client``.

        Args:
            client: Client used to pop the stash.
            active: Whether a stash was actually created.
        """

        self._client = client
        self._active = active

    @property
    def active(self) -> bool:
        """Return whether a stash is still waiting to be popped."""

        return self._active

    def release(self) -> None:
        """Pop the stash if one is held; failures are logged, not raised."""

        if not self._active:
            return
        self._active = False
        try:
            self._client.pop_stash()
        except ExecError as exc:
            LOGGER.error("Error popping stash: %s", exc)

    def __enter__(self) -> StashGuard:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


__all__ = ["GitClient", "GitRunner", "StashGuard"]
