# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Console rendering of per-path results and the final failure summary."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from ..logging import print_line


@dataclass(frozen=True, slots=True)
class Glyphs:
    """Symbols prefixed to result lines."""

    ring: str
    tidied: str
    unchanged: str
    maybe_changed: str
    lint_clean: str
    lint_dirty: str
    empty: str
    bullet: str
    execution_error: str


FUN_GLYPHS = Glyphs(
    ring="💍",
    tidied="💧",
    unchanged="✨",
    maybe_changed="🤷",
    lint_clean="💯",
    lint_dirty="💩",
    empty="⚫",
    bullet="▶",
    execution_error="💥",
)

BORING_GLYPHS = Glyphs(
    ring=":",
    tidied="*",
    unchanged="|",
    maybe_changed="?",
    lint_clean="|",
    lint_dirty="*",
    empty="_",
    bullet="*",
    execution_error="!",
)


@dataclass(frozen=True, slots=True)
class ActionFailure:
    """One failed lint or a per-path execution error."""

    config_key: str
    paths: tuple[Path, ...]
    error: str


@dataclass(slots=True)
class Reporter:
    """Print result lines honouring the quiet, ASCII and colour settings."""

    use_ascii: bool = False
    quiet: bool = False
    color: bool = True
    env: Mapping[str, str] = field(default_factory=lambda: os.environ)

    @property
    def glyphs(self) -> Glyphs:
        """Return the symbol set matching :attr:`use_ascii`."""

        return BORING_GLYPHS if self.use_ascii else FUN_GLYPHS

    def _emit(self, message: str, *, style: str | None = None, always: bool = False) -> None:
        if self.quiet and not always:
            return
        print_line(message, style=style, use_emoji=not self.use_ascii, use_color=self.color)

    def starting(self, action_title: str, description: str) -> None:
        """Announce the run, e.g. ``Linting all files in the project``."""

        self._emit(f"{self.glyphs.ring} {action_title} {description}")

    def tidied(self, name: str, summary: str) -> None:
        """Report that a tidier rewrote files.

        Args:
            name: Filter name.
            summary: Short description of the paths.
        """

        self._emit(f"{self.glyphs.tidied} Tidied by {name}:    {summary}", style="green")

    def unchanged(self, name: str, summary: str) -> None:
        """Report that a tidier left every file as it was."""

        self._emit(f"{self.glyphs.unchanged} Unchanged by {name}: {summary}")

    def maybe_changed(self, name: str, summary: str) -> None:
        """Report a tidy run whose effect on disk was not measured."""

        self._emit(f"{self.glyphs.maybe_changed} Maybe changed by {name}: {summary}", style="yellow")

    def passed(self, name: str, summary: str) -> None:
        """Report a clean lint result.

        Args:
            name: Filter name.
            summary: Short description of the paths.
        """

        self._emit(f"{self.glyphs.lint_clean} Passed {name}: {summary}", style="green")

    def lint_failed(
        self,
        name: str,
        summary: str,
        *,
        paths: Sequence[Path],
        stdout: str | None,
        stderr: str | None,
    ) -> None:
        """Report a lint failure with the tool output and an optional CI annotation.

        Args:
            name: Filter name.
            summary: Short description of the paths.
            paths: Paths the failing invocation covered.
            stdout: Captured standard output of the linter.
            stderr: Captured standard error of the linter.
        """

        self._emit(f"{self.glyphs.lint_dirty} Failed {name}: {summary}", style="red", always=True)
        for stream in (stdout, stderr):
            if stream:
                self._emit(stream.rstrip("\n"), always=True)
        if self.env.get("GITHUB_ACTIONS"):
            if len(paths) == 1:
                self._emit(f"::error file={paths[0]}::Linting with {name} failed", always=True)
            else:
                self._emit(f"::error::Linting with {name} failed", always=True)

    def execution_error(self, name: str, summary: str) -> None:
        """Report that a filter could not run; shown even in quiet mode."""

        self._emit(f"{self.glyphs.execution_error} Error from {name}: {summary}", style="red", always=True)

    def no_files(self, message: str) -> None:
        """Report that the selection found nothing to do."""

        self._emit(f"{self.glyphs.empty} {message}")

    def failure_summary(self, action_noun: str, failures: Sequence[ActionFailure]) -> str:
        """Return the multi-line summary printed when a run fails.

        Args:
            action_noun: ``linting`` or ``tidying``.
            failures: Every failure collected during the run.

        Returns:
            str: Header followed by one bullet per failure.
        """

        plural = "s" if len(failures) > 1 else ""
        lines = [f"Error{plural} when {action_noun} files:"]
        for failure in failures:
            paths = " ".join(str(path) for path in failure.paths)
            lines.append(f"  {self.glyphs.bullet} [{failure.config_key}] failed for [{paths}]")
            lines.append(f"    {failure.error}")
        return "\n".join(lines)

    def error(self, message: str) -> None:
        """Print ``message`` in red, even in quiet mode."""

        self._emit(message, style="red", always=True)


__all__ = ["ActionFailure", "BORING_GLYPHS", "FUN_GLYPHS", "Glyphs", "Reporter"]
