# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Directory walking that honours VCS ignore files."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from pathspec import GitIgnoreSpec

from ..constants import VCS_DIRS

LOGGER = logging.getLogger(__name__)

# Checked in this order within one directory; the first file with an
# opinion about a path wins.
IGNORE_FILE_NAMES: Final[tuple[str, ...]] = (".ignore", ".gitignore")
_GIT_ONLY_IGNORE_FILES: Final[frozenset[str]] = frozenset({".gitignore"})


@dataclass(frozen=True, slots=True)
class IgnoreFile:
    """Patterns loaded from one ignore file, anchored at ``directory``."""

    directory: Path
    source: Path
    spec: GitIgnoreSpec

    @classmethod
    def load(cls, source: Path, directory: Path) -> IgnoreFile | None:
        """Parse ``source`` into an :class:`IgnoreFile`.

        Lines that do not compile are skipped with a warning, as git does.

        Args:
            source: Ignore file to read.
            directory: Directory the patterns are relative to.

        Returns:
            IgnoreFile | None: Parsed rules, or ``None`` when the file holds
            no usable patterns or cannot be read.
        """

        try:
            text = source.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            LOGGER.warning("Could not read ignore file %s: %s", source, exc)
            return None
        lines: list[str] = []
        for line in text.splitlines():
            try:
                GitIgnoreSpec.from_lines([line])
            except ValueError as exc:
                LOGGER.warning("Skipping invalid pattern %r in %s: %s", line, source, exc)
                continue
            lines.append(line)
        spec = GitIgnoreSpec.from_lines(lines)
        if not any(pattern.include is not None for pattern in spec.patterns):
            return None
        return cls(directory=directory, source=source, spec=spec)

    def decide(self, path: Path, *, is_directory: bool) -> bool | None:
        """Return ``True`` (ignored), ``False`` (re-included) or ``None`` (no match).

        Args:
            path: Absolute path beneath :attr:`directory`.
            is_directory: Whether ``path`` is a directory.

        Returns:
            bool | None: Verdict of the last matching pattern.
        """

        try:
            relative = path.relative_to(self.directory).as_posix()
        except ValueError:
            return None
        if is_directory:
            relative = f"{relative}/"
        verdict: bool | None = None
        for pattern in self.spec.patterns:
            if pattern.include is None:
                continue
            if pattern.match_file(relative) is not None:
                verdict = pattern.include
        return verdict

    def released_for(self, start: Path) -> IgnoreFile:
        """Return a copy that no longer ignores ``start`` or its parents.

        A walk that starts inside an ignored directory was asked for that
        directory explicitly, so patterns that ignore ``start`` (or a parent
        of it below :attr:`directory`) are dropped. Patterns that match
        entries below ``start`` are kept.

        Args:
            start: Absolute directory the walk starts from.

        Returns:
            IgnoreFile: ``self`` when nothing had to be dropped.
        """

        ancestors = [
            f"{candidate.relative_to(self.directory).as_posix()}/"
            for candidate in (start, *start.parents)
            if self.directory in candidate.parents
        ]
        kept = [
            pattern
            for pattern in self.spec.patterns
            if not (pattern.include and any(pattern.match_file(ancestor) is not None for ancestor in ancestors))
        ]
        if len(kept) == len(self.spec.patterns):
            return self
        LOGGER.debug("Not applying rules from %s that ignore %s", self.source, start)
        return IgnoreFile(directory=self.directory, source=self.source, spec=GitIgnoreSpec(kept))


def find_git_root(start: Path) -> Path | None:
    """Return the nearest ancestor of ``start`` containing a ``.git`` entry."""

    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def is_ignored(path: Path, rules: Sequence[IgnoreFile], *, is_directory: bool) -> bool:
    """Return whether ``path`` is ignored by ``rules``.

    Args:
        path: Absolute candidate path.
        rules: Ignore files ordered from lowest to highest precedence.
        is_directory: Whether ``path`` is a directory.

    Returns:
        bool: ``True`` when the highest-precedence opinion is "ignore".
    """

    for rule in reversed(rules):
        verdict = rule.decide(path, is_directory=is_directory)
        if verdict is not None:
            return verdict
    return False


class IgnoreWalker:
    """Walk directories below a project root skipping ignored entries.

    ``.gitignore`` files and ``.git/info/exclude`` only apply inside a git
    work tree; ``.ignore`` files always apply. VCS metadata directories are
    never descended into. Hidden files are included.
    """

    def __init__(self, root: Path) -> None:
        """Prepare a walker for the project at ``root``.

        Args:
            root: Absolute, resolved project root.
        """

        self.root = root
        self.git_root = find_git_root(root)

    def _rules_for_directory(self, directory: Path) -> list[IgnoreFile]:
        # Reversed so that `.ignore` ends up with the higher precedence.
        rules: list[IgnoreFile] = []
        for name in reversed(IGNORE_FILE_NAMES):
            if name in _GIT_ONLY_IGNORE_FILES and self.git_root is None:
                continue
            candidate = directory / name
            if candidate.is_file():
                loaded = IgnoreFile.load(candidate, directory)
                if loaded is not None:
                    rules.append(loaded)
        return rules

    def _base_rules(self, base: Path) -> list[IgnoreFile]:
        """Collect the rules inherited by ``base`` from its ancestors."""

        rules: list[IgnoreFile] = []
        top = self.git_root or self.root
        if self.git_root is not None:
            exclude = self.git_root / ".git" / "info" / "exclude"
            if exclude.is_file():
                loaded = IgnoreFile.load(exclude, self.git_root)
                if loaded is not None:
                    rules.append(loaded)
        try:
            relative = base.parent.relative_to(top)
        except ValueError:
            return rules
        current = top
        rules.extend(self._rules_for_directory(current))
        for part in relative.parts:
            current = current / part
            rules.extend(self._rules_for_directory(current))
        return rules

    def walk(self, base: Path | None = None) -> Iterator[Path]:
        """Yield every non-ignored file below ``base``.

        ``base`` itself is always walked, even when an ignore file in one of
        its parents ignores it.

        Args:
            base: Directory to walk; defaults to the project root.

        Yields:
            Path: Absolute file paths in walk order.
        """

        start = base or self.root
        inherited: dict[Path, list[IgnoreFile]] = {
            start: [rule.released_for(start) for rule in self._base_rules(start)],
        }
        for dirpath, dirnames, filenames in os.walk(start):
            current = Path(dirpath)
            rules = inherited.pop(current, [])
            rules = [*rules, *self._rules_for_directory(current)]
            kept: list[str] = []
            for name in sorted(dirnames):
                if name in VCS_DIRS:
                    continue
                child = current / name
                if is_ignored(child, rules, is_directory=True):
                    LOGGER.debug("Skipping ignored directory %s", child)
                    continue
                kept.append(name)
                inherited[child] = rules
            dirnames[:] = kept
            for filename in sorted(filenames):
                candidate = current / filename
                if is_ignored(candidate, rules, is_directory=False):
                    continue
                yield candidate


__all__ = ["IGNORE_FILE_NAMES", "IgnoreFile", "IgnoreWalker", "find_git_root", "is_ignored"]
