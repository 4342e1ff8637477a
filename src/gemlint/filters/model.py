# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Value types and errors describing a configured filter."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..constants import DEFAULT_LABEL
from ..errors import ConfigError, FilterError


class FilterKind(str, Enum):
    """Whether a filter lints, tidies or does both."""

    LINT = "lint"
    TIDY = "tidy"
    BOTH = "both"

    @property
    def what(self) -> str:
        """Return the noun used for this kind in messages."""

        return {FilterKind.LINT: "linter", FilterKind.TIDY: "tidier", FilterKind.BOTH: "linter/tidier"}[self]


class Action(str, Enum):
    """Operation requested from the command line."""

    LINT = "lint"
    TIDY = "tidy"


class InvokeStrategy(str, Enum):
    """Configured batching of paths into subprocess calls."""

    PER_FILE = "per-file"
    PER_DIR = "per-dir"
    ONCE = "once"
    PER_FILE_OR_DIR = "per-file-or-dir"
    PER_FILE_OR_ONCE = "per-file-or-once"
    PER_DIR_OR_ONCE = "per-dir-or-once"


THRESHOLD_STRATEGIES = frozenset(
    {InvokeStrategy.PER_FILE_OR_DIR, InvokeStrategy.PER_FILE_OR_ONCE, InvokeStrategy.PER_DIR_OR_ONCE}
)


class RunScope(str, Enum):
    """Effective scope of one filter run: files, directories or the whole tree."""

    FILES = "files"
    DIRS = "dirs"
    ROOT = "root"


_STATIC_SCOPES = {
    InvokeStrategy.PER_FILE: RunScope.FILES,
    InvokeStrategy.PER_DIR: RunScope.DIRS,
    InvokeStrategy.ONCE: RunScope.ROOT,
}


@dataclass(frozen=True, slots=True)
class Invoke:
    """Invocation strategy plus the threshold used by the adaptive variants."""

    strategy: InvokeStrategy = InvokeStrategy.PER_FILE
    threshold: int | None = None

    def __post_init__(self) -> None:
        if self.strategy in THRESHOLD_STRATEGIES:
            if self.threshold is None or self.threshold < 1:
                raise ValueError(f"{self.strategy.value} requires a positive threshold")
        elif self.threshold is not None:
            raise ValueError(f"{self.strategy.value} does not take a threshold")

    def scope_for(self, file_count: int, dir_count: int) -> RunScope:
        """Return the run scope for a run over the given number of files and directories.

        Args:
            file_count: Number of files the filter would act on.
            dir_count: Number of distinct directories holding those files.

        Returns:
            RunScope: Scope to use for this run.
        """

        strategy = self.strategy
        if self.threshold is None:
            return _STATIC_SCOPES[strategy]
        if strategy is InvokeStrategy.PER_FILE_OR_DIR:
            return RunScope.FILES if file_count < self.threshold else RunScope.DIRS
        if strategy is InvokeStrategy.PER_FILE_OR_ONCE:
            return RunScope.FILES if file_count < self.threshold else RunScope.ROOT
        return RunScope.DIRS if dir_count < self.threshold else RunScope.ROOT

    def __str__(self) -> str:
        if self.threshold is None:
            return f'invoke = "{self.strategy.value}"'
        return f"invoke.{self.strategy.value} = {self.threshold}"


class WorkingDirKind(str, Enum):
    """Where a filter's subprocess runs."""

    ROOT = "root"
    DIR = "dir"
    CHDIR_TO = "chdir_to"
    SUB_ROOTS = "sub_roots"


@dataclass(frozen=True, slots=True)
class WorkingDir:
    """Working-directory policy; ``chdir_to`` and ``sub_roots`` are root-relative."""

    kind: WorkingDirKind = WorkingDirKind.ROOT
    chdir_to: Path | None = None
    sub_roots: tuple[Path, ...] = ()

    @classmethod
    def root(cls) -> WorkingDir:
        return cls(WorkingDirKind.ROOT)

    @classmethod
    def dir(cls) -> WorkingDir:
        return cls(WorkingDirKind.DIR)

    def __str__(self) -> str:
        if self.kind is WorkingDirKind.CHDIR_TO:
            return f'chdir_to = "{self.chdir_to}"'
        if self.kind is WorkingDirKind.SUB_ROOTS:
            return "sub_roots = [" + ", ".join(f'"{root}"' for root in self.sub_roots) + "]"
        return f'"{self.kind.value}"'


class PathArgStyle(str, Enum):
    """How selected paths are rendered onto the command line."""

    FILE = "file"
    DIR = "dir"
    NONE = "none"
    DOT = "dot"
    ABSOLUTE_FILE = "absolute-file"
    ABSOLUTE_DIR = "absolute-dir"


class TidyOutcome(str, Enum):
    """Result of a tidy invocation as observed on disk."""

    CHANGED = "changed"
    UNCHANGED = "unchanged"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True, slots=True)
class LintOutcome:
    """Result of a lint invocation; ``passed`` is ``False`` for a lint failure exit code."""

    passed: bool
    stdout: str | None = None
    stderr: str | None = None


@dataclass(frozen=True, slots=True)
class FilterParams:
    """Validated configuration for one filter, before patterns are compiled."""

    name: str
    kind: FilterKind
    cmd: tuple[str, ...]
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    invoke: Invoke = field(default_factory=Invoke)
    working_dir: WorkingDir = field(default_factory=WorkingDir)
    path_args: PathArgStyle = PathArgStyle.FILE
    env: dict[str, str] = field(default_factory=dict)
    lint_flags: tuple[str, ...] = ()
    tidy_flags: tuple[str, ...] = ()
    path_flag: str | None = None
    ok_exit_codes: frozenset[int] = frozenset({0})
    lint_failure_exit_codes: frozenset[int] = frozenset()
    expect_stderr: bool = False
    ignore_stderr: tuple[str, ...] = ()
    labels: tuple[str, ...] = (DEFAULT_LABEL,)


class BothKindRequiresFlags(ConfigError):
    """Raised when a ``both`` filter cannot tell lint and tidy calls apart."""

    def __init__(self, name: str) -> None:
        """Record the misconfigured filter name."""

        super().__init__(
            f"The {name} command lints and tidies, so it must define lint_flags and/or tidy_flags",
        )
        self.name = name


class OverlappingExitCodes(ConfigError):
    """Raised when an exit code is both "ok" and a lint failure."""

    def __init__(self, name: str, codes: frozenset[int]) -> None:
        """Record the exit codes present in both sets.

        Args:
            name: Filter name.
            codes: Codes listed as ok and as lint failure.
        """

        listed = ", ".join(str(code) for code in sorted(codes))
        super().__init__(f"The {name} command lists exit code(s) {listed} as both ok and lint failure")
        self.name = name
        self.codes = codes


class InvalidStderrPattern(ConfigError):
    """Raised when an ``ignore_stderr`` regex does not compile."""

    def __init__(self, name: str, pattern: str, reason: str) -> None:
        """Record the pattern that failed to compile.

        Args:
            name: Filter name.
            pattern: Offending regular expression.
            reason: Message from :mod:`re`.
        """

        super().__init__(f"The {name} command has an invalid ignore_stderr pattern {pattern!r}: {reason}")
        self.name = name
        self.pattern = pattern


class WrongFilterKind(FilterError):
    """Raised when lint is requested from a tidier or tidy from a linter."""

    def __init__(self, action: Action, name: str, kind: FilterKind) -> None:
        """Record the requested action and the filter that cannot perform it.

        Args:
            action: Lint or tidy, as requested.
            name: Filter name.
            kind: Configured kind of the filter.
        """

        super().__init__(f"Cannot {action.value} with the {name} command, which is a {kind.what}")
        self.action = action
        self.name = name
        self.kind = kind


class CanOnlyOperateOnDirectories(FilterError):
    """Raised when a directory-scoped run is handed a file."""

    def __init__(self, name: str, path: Path) -> None:
        """Record the filter and the file it was handed."""

        super().__init__(f"The {name} command runs per directory but was given the file {path}")
        self.name = name
        self.path = path


class CanOnlyOperateOnFiles(FilterError):
    """Raised when a file-scoped run is handed a directory."""

    def __init__(self, name: str, path: Path) -> None:
        """Record the filter and the directory it was handed."""

        super().__init__(f"The {name} command runs per file but was given the directory {path}")
        self.name = name
        self.path = path


class NoMatchingSubRoot(FilterError):
    """Raised when a path is not under exactly one declared sub-root."""

    def __init__(self, name: str, path: Path, sub_roots: tuple[Path, ...]) -> None:
        """Record the path and the sub-roots it was checked against.

        Args:
            name: Filter name.
            path: Project-relative path being acted on.
            sub_roots: Declared sub-roots of the filter.
        """

        roots = ", ".join(str(root) for root in sub_roots)
        super().__init__(f"The path {path} for the {name} command is not under exactly one of: {roots}")
        self.name = name
        self.path = path
        self.sub_roots = sub_roots


class PrefixNotFound(FilterError):
    """Raised when a path cannot be rendered relative to the working directory."""

    def __init__(self, path: Path, prefix: Path) -> None:
        """Record the path and the working-directory prefix it lacks.

        Args:
            path: Project-relative path being rendered.
            prefix: Absolute working directory of the subprocess.
        """

        super().__init__(f"The path {path} does not start with the prefix {prefix}")
        self.path = path
        self.prefix = prefix


class PathDoesNotExist(FilterError):
    """Raised when a path disappears between selection and snapshotting."""

    def __init__(self, path: Path) -> None:
        """Record the path that vanished."""

        super().__init__(f"Path {path} should exist but it does not")
        self.path = path


__all__ = [
    "Action",
    "BothKindRequiresFlags",
    "CanOnlyOperateOnDirectories",
    "CanOnlyOperateOnFiles",
    "FilterKind",
    "FilterParams",
    "InvalidStderrPattern",
    "Invoke",
    "InvokeStrategy",
    "LintOutcome",
    "NoMatchingSubRoot",
    "OverlappingExitCodes",
    "PathArgStyle",
    "PathDoesNotExist",
    "PrefixNotFound",
    "RunScope",
    "THRESHOLD_STRATEGIES",
    "TidyOutcome",
    "WorkingDir",
    "WorkingDirKind",
    "WrongFilterKind",
]
