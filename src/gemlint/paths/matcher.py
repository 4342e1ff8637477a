# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Gitignore-style path matching rooted at a project directory."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path, PurePath

from pathspec import GitIgnoreSpec

from ..errors import ConfigError


class PatternSyntaxError(ConfigError):
    """Raised when a gitignore pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        """Initialise the error with the offending pattern.

        Args:
            pattern: Pattern text exactly as it was configured.
            reason: Explanation reported by the pattern compiler.
        """

        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


@dataclass(frozen=True, slots=True)
class PathMatcher:
    """Ordered set of gitignore patterns evaluated against ``root``.

    The last pattern that matches a path decides the outcome, so a later
    ``!pattern`` re-includes a path excluded by an earlier rule. Paths that
    match no pattern are reported as not matching.
    """

    root: Path
    patterns: tuple[str, ...]
    spec: GitIgnoreSpec

    @classmethod
    def compile(cls, root: Path, patterns: Iterable[str]) -> PathMatcher:
        """Compile ``patterns`` relative to ``root``.

        Args:
            root: Directory that anchored patterns (leading ``/``) refer to.
            patterns: Gitignore pattern lines in declaration order.

        Returns:
            PathMatcher: Matcher ready for concurrent, read-only use.

        Raises:
            PatternSyntaxError: If any pattern is malformed.
        """

        lines = tuple(patterns)
        for line in lines:
            try:
                GitIgnoreSpec.from_lines([line])
            except ValueError as exc:
                raise PatternSyntaxError(line, str(exc)) from exc
        return cls(root=root, patterns=lines, spec=GitIgnoreSpec.from_lines(lines))

    def matches(self, path: PurePath | str, *, is_directory: bool = False) -> bool:
        """Return whether ``path`` is matched by the compiled patterns.

        Args:
            path: Path relative to :attr:`root`, or an absolute path beneath it.
            is_directory: ``True`` when ``path`` names a directory, which lets
                directory-only patterns (trailing ``/``) apply.

        Returns:
            bool: ``True`` when the last matching pattern is a positive one.
        """

        if not self.patterns:
            return False
        candidate = self._normalise(PurePath(path))
        if candidate is None:
            return False
        if is_directory:
            candidate = f"{candidate}/"
        return self.spec.match_file(candidate)

    def _normalise(self, path: PurePath) -> str | None:
        """Return ``path`` as a root-relative POSIX string, or ``None``.

        Args:
            path: Candidate path supplied by the caller.

        Returns:
            str | None: Relative path text, or ``None`` when the path lies
            outside the root or names the root itself.
        """

        if path.is_absolute():
            try:
                path = path.relative_to(self.root)
            except ValueError:
                return None
        parts = [part for part in path.parts if part not in {"", "."}]
        if not parts:
            return None
        return "/".join(parts)


def compile_matcher(root: Path, *pattern_sets: Iterable[str]) -> PathMatcher:
    """Compile several pattern lists into one matcher, preserving order.

    Args:
        root: Directory anchored patterns are relative to.
        *pattern_sets: Pattern iterables concatenated in the given order.

    Returns:
        PathMatcher: Compiled matcher.
    """

    patterns: list[str] = []
    for pattern_set in pattern_sets:
        patterns.extend(pattern_set)
    return PathMatcher.compile(root, patterns)


__all__ = ["PathMatcher", "PatternSyntaxError", "compile_matcher"]
