# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File metadata snapshots used to detect whether a tidier changed anything."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .model import PathDoesNotExist

LOGGER = logging.getLogger(__name__)

PathFilter = Callable[[Path], bool]


@dataclass(frozen=True, slots=True)
class PathInfo:
    """Size and content digest of one file."""

    size: int
    digest: bytes

    @classmethod
    def of(cls, path: Path) -> PathInfo:
        return cls(size=path.stat().st_size, digest=_digest(path))


def _digest(path: Path) -> bytes:
    return hashlib.sha256(path.read_bytes()).digest()


@dataclass(frozen=True, slots=True)
class PathSnapshot:
    """Metadata for the files a tidy run may touch.

    Attributes:
        project_root: Directory the ``wanted`` callback's paths are relative to.
        directory: Absolute directory scanned for a directory-scoped run, or
            ``None`` when only a single file was captured.
        entries: Metadata keyed by absolute file path.
    """

    project_root: Path
    directory: Path | None
    entries: dict[Path, PathInfo]

    @classmethod
    def capture(cls, project_root: Path, target: Path, wanted: PathFilter) -> PathSnapshot:
        """Record metadata for ``target``.

        Args:
            project_root: Absolute project root.
            target: Project-relative file or directory.
            wanted: Predicate over project-relative paths selecting which
                directory members are recorded.

        Returns:
            PathSnapshot: Captured state.

        Raises:
            PathDoesNotExist: If ``target`` does not exist.
        """

        full = project_root / target
        if full.is_file():
            return cls(project_root=project_root, directory=None, entries={full: PathInfo.of(full)})
        if full.is_dir():
            entries = {
                member: PathInfo.of(member)
                for member in sorted(full.iterdir())
                if member.is_file() and wanted(member.relative_to(project_root))
            }
            return cls(project_root=project_root, directory=full, entries=entries)
        raise PathDoesNotExist(target)

    def changed(self, wanted: PathFilter) -> bool:
        """Return whether the files on disk differ from this snapshot.

        Size and digest always decide; modification times are not consulted,
        so a rewrite that keeps the mtime is still reported.

        Args:
            wanted: Same predicate that was used for :meth:`capture`.

        Returns:
            bool: ``True`` when any recorded file changed or disappeared, or
            when a new wanted file appeared in the scanned directory.
        """

        for path, before in self.entries.items():
            LOGGER.debug("Checking %s for changes", path)
            try:
                stat = path.stat()
            except FileNotFoundError:
                return True
            if stat.st_size != before.size:
                return True
            if _digest(path) != before.digest:
                return True

        if self.directory is None:
            return False
        if not self.directory.is_dir():
            return True
        for member in self.directory.iterdir():
            if member in self.entries or not member.is_file():
                continue
            if wanted(member.relative_to(self.project_root)):
                return True
        return False


__all__ = ["PathInfo", "PathSnapshot"]
