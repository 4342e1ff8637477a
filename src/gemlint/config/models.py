# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Pydantic models describing the gemlint configuration file."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..constants import DEFAULT_LABEL
from ..errors import ConfigError
from ..filters.model import (
    THRESHOLD_STRATEGIES,
    FilterKind,
    FilterParams,
    Invoke,
    InvokeStrategy,
    PathArgStyle,
    WorkingDir,
    WorkingDirKind,
)

InvokeValue = str | dict[str, int]
WorkingDirValue = str | dict[str, str | list[str]]
LegacyRunMode = Literal["files", "dirs", "root"]

_STATIC_STRATEGIES = {strategy.value for strategy in InvokeStrategy if strategy not in THRESHOLD_STRATEGIES}
_THRESHOLD_KEYS = {strategy.value for strategy in THRESHOLD_STRATEGIES}


class CannotMixOldAndNewParams(ConfigError):
    """Raised when legacy ``run_mode``/``chdir`` is combined with the newer keys."""

    def __init__(self, name: str) -> None:
        """Record the command that mixes old and new keys."""

        super().__init__(
            f"The {name} command mixes old command params (run_mode or chdir) "
            "with new command params (invoke, working_dir, or path_args)",
        )
        self.name = name


class InvalidInvocationCombination(ConfigError):
    """Raised when ``invoke``, ``working_dir`` and ``path_args`` cannot work together."""

    def __init__(self, name: str, reason: str) -> None:
        """Record the command and why its settings conflict.

        Args:
            name: Command name.
            reason: Human-readable description of the conflict.
        """

        super().__init__(f"The {name} command is misconfigured: {reason}")
        self.name = name
        self.reason = reason


def _as_strings(value: Any) -> tuple[str, ...]:
    """Accept a single string or a list of strings."""

    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence):
        return tuple(value)
    raise ValueError("expected a string or a list of strings")


def _as_exit_codes(value: Any) -> tuple[int, ...]:
    if value is None:
        return ()
    items = value if isinstance(value, (list, tuple)) else [value]
    codes: list[int] = []
    for item in items:
        if isinstance(item, bool) or not isinstance(item, int):
            raise ValueError("exit codes must be integers")
        if not 0 <= item <= 255:
            raise ValueError(f"exit code {item} is not an integer from 0-255")
        codes.append(item)
    return tuple(codes)


class CommandConfig(BaseModel):
    """One entry of the ``[commands]`` table."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    kind: FilterKind = Field(alias="type")
    include: tuple[str, ...]
    exclude: tuple[str, ...] = ()
    invoke: InvokeValue | None = None
    working_dir: WorkingDirValue | None = None
    path_args: PathArgStyle | None = None
    run_mode: LegacyRunMode | None = None
    chdir: bool | None = None
    cmd: tuple[str, ...]
    env: dict[str, str] = Field(default_factory=dict)
    lint_flags: tuple[str, ...] = ()
    tidy_flags: tuple[str, ...] = ()
    path_flag: str = ""
    ok_exit_codes: tuple[int, ...] = (0,)
    lint_failure_exit_codes: tuple[int, ...] = ()
    expect_stderr: bool = False
    ignore_stderr: tuple[str, ...] = ()
    labels: tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _normalise_keys(cls, data: Any) -> Any:
        """Accept ``lint-flags`` style keys as aliases of ``lint_flags``."""

        if isinstance(data, Mapping):
            return {str(key).replace("-", "_"): value for key, value in data.items()}
        return data

    @field_validator("include", "exclude", "cmd", "lint_flags", "tidy_flags", "ignore_stderr", "labels", mode="before")
    @classmethod
    def _coerce_strings(cls, value: Any) -> tuple[str, ...]:
        return _as_strings(value)

    @field_validator("ok_exit_codes", "lint_failure_exit_codes", mode="before")
    @classmethod
    def _coerce_codes(cls, value: Any) -> tuple[int, ...]:
        """Return exit codes from an integer or a list of integers.

        Raises:
            ValueError: If a value is not an integer or falls outside 0-255.
        """

        return _as_exit_codes(value)

    @field_validator("cmd")
    @classmethod
    def _require_cmd(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value or not value[0]:
            raise ValueError("cmd must name an executable")
        return value

    @field_validator("invoke")
    @classmethod
    def _check_invoke(cls, value: InvokeValue | None) -> InvokeValue | None:
        if value is None:
            return None
        if isinstance(value, str):
            if value not in _STATIC_STRATEGIES:
                raise ValueError(f"invoke must be one of {sorted(_STATIC_STRATEGIES)} or a threshold table")
            return value
        if len(value) != 1 or next(iter(value)) not in _THRESHOLD_KEYS:
            raise ValueError(f"an invoke table must contain exactly one of {sorted(_THRESHOLD_KEYS)}")
        threshold = next(iter(value.values()))
        if threshold < 1:
            raise ValueError("an invoke threshold must be at least 1")
        return value

    @field_validator("working_dir")
    @classmethod
    def _check_working_dir(cls, value: WorkingDirValue | None) -> WorkingDirValue | None:
        if value is None:
            return None
        if isinstance(value, str):
            if value not in {"root", "dir"}:
                raise ValueError('working_dir must be "root", "dir", or a chdir_to or sub_roots table')
            return value
        if len(value) != 1:
            raise ValueError("a working_dir table must contain exactly one key")
        key, entry = next(iter(value.items()))
        if key == "chdir_to":
            if not isinstance(entry, str) or not entry:
                raise ValueError("the chdir_to key must be a non-empty path")
        elif key == "sub_roots":
            if not isinstance(entry, list) or not entry or not all(isinstance(item, str) and item for item in entry):
                raise ValueError("the sub_roots key must be a non-empty list of paths")
        else:
            raise ValueError('the only valid keys for a working_dir table are "chdir_to" and "sub_roots"')
        return value

    def _parsed_invoke(self) -> Invoke:
        if self.invoke is None:
            return Invoke()
        if isinstance(self.invoke, str):
            return Invoke(InvokeStrategy(self.invoke))
        ((key, threshold),) = self.invoke.items()
        return Invoke(InvokeStrategy(key), threshold)

    def _parsed_working_dir(self) -> WorkingDir:
        if not isinstance(self.working_dir, dict):
            return WorkingDir.dir() if self.working_dir == "dir" else WorkingDir.root()
        ((key, entry),) = self.working_dir.items()
        if key == "chdir_to" and isinstance(entry, str):
            return WorkingDir(WorkingDirKind.CHDIR_TO, chdir_to=Path(entry))
        return WorkingDir(WorkingDirKind.SUB_ROOTS, sub_roots=tuple(Path(item) for item in entry))

    def invocation(self, name: str) -> tuple[Invoke, WorkingDir, PathArgStyle]:
        """Return the invocation triple, translating legacy keys.

        Args:
            name: Command name used in error messages.

        Returns:
            tuple[Invoke, WorkingDir, PathArgStyle]: Effective settings.

        Raises:
            CannotMixOldAndNewParams: If legacy and new keys are combined.
            InvalidInvocationCombination: If the combination cannot work.
        """

        legacy = self.run_mode is not None or self.chdir is not None
        if legacy and (self.invoke is not None or self.working_dir is not None or self.path_args is not None):
            raise CannotMixOldAndNewParams(name)
        if legacy:
            return _translate_legacy(self.run_mode or "files", bool(self.chdir))

        invoke = self._parsed_invoke()
        working_dir = self._parsed_working_dir()
        path_args = self.path_args or PathArgStyle.FILE
        strategy = invoke.strategy
        if strategy is InvokeStrategy.PER_FILE and path_args not in {PathArgStyle.FILE, PathArgStyle.ABSOLUTE_FILE}:
            raise InvalidInvocationCombination(name, f'cannot set invoke = "per-file" and path_args = "{path_args.value}"')
        if (
            strategy is InvokeStrategy.PER_DIR
            and working_dir.kind is not WorkingDirKind.DIR
            and path_args in {PathArgStyle.DOT, PathArgStyle.NONE}
        ):
            raise InvalidInvocationCombination(name, f'cannot set invoke = "per-dir" and path_args = "{path_args.value}"')
        if strategy is InvokeStrategy.ONCE and working_dir.kind is WorkingDirKind.DIR:
            raise InvalidInvocationCombination(name, 'cannot set invoke = "once" and working_dir = "dir"')
        return invoke, working_dir, path_args

    def matches_label(self, label: str) -> bool:
        """Return whether this command runs for ``label``."""

        return label in (self.labels or (DEFAULT_LABEL,))

    def to_params(self, name: str) -> FilterParams:
        """Convert this entry into :class:`FilterParams`.

        Args:
            name: Key of the entry in the ``[commands]`` table.

        Returns:
            FilterParams: Parameters ready to build a filter.
        """

        invoke, working_dir, path_args = self.invocation(name)
        return FilterParams(
            name=name,
            kind=self.kind,
            cmd=self.cmd,
            include=self.include,
            exclude=self.exclude,
            invoke=invoke,
            working_dir=working_dir,
            path_args=path_args,
            env=dict(self.env),
            lint_flags=self.lint_flags,
            tidy_flags=self.tidy_flags,
            path_flag=self.path_flag or None,
            ok_exit_codes=frozenset(self.ok_exit_codes),
            lint_failure_exit_codes=frozenset(self.lint_failure_exit_codes),
            expect_stderr=self.expect_stderr,
            ignore_stderr=self.ignore_stderr,
            labels=self.labels or (DEFAULT_LABEL,),
        )


def _translate_legacy(run_mode: LegacyRunMode, chdir: bool) -> tuple[Invoke, WorkingDir, PathArgStyle]:
    """Map legacy ``run_mode``/``chdir`` onto the newer invocation keys."""

    if run_mode == "files":
        return Invoke(InvokeStrategy.PER_FILE), WorkingDir.dir() if chdir else WorkingDir.root(), PathArgStyle.FILE
    if run_mode == "dirs":
        if chdir:
            return Invoke(InvokeStrategy.PER_DIR), WorkingDir.dir(), PathArgStyle.NONE
        return Invoke(InvokeStrategy.PER_DIR), WorkingDir.root(), PathArgStyle.DIR
    return Invoke(InvokeStrategy.ONCE), WorkingDir.root(), PathArgStyle.NONE if chdir else PathArgStyle.DOT


class ProjectConfig(BaseModel):
    """Top level of the configuration file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    exclude: tuple[str, ...] = ()
    commands: dict[str, CommandConfig] = Field(default_factory=dict)

    @field_validator("exclude", mode="before")
    @classmethod
    def _coerce_exclude(cls, value: Any) -> tuple[str, ...]:
        return _as_strings(value)


__all__ = [
    "CannotMixOldAndNewParams",
    "CommandConfig",
    "InvalidInvocationCombination",
    "ProjectConfig",
]
