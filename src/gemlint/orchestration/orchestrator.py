# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Drive every configured filter over the selected files."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

from ..config.loader import LoadedConfig
from ..errors import ConfigError, FilterError
from ..execution.process import ExecError
from ..filters.filter import Filter
from ..filters.model import Action, LintOutcome, RunScope, TidyOutcome
from ..paths.groups import Group, make_groups
from ..paths.mode import SelectionMode
from ..paths.selector import FileSelector
from ..reporting.console import ActionFailure, Reporter
from ..vcs.git import GitClient

LOGGER = logging.getLogger(__name__)

NO_FILES_MESSAGE = "No files found"


class ExitStatus(IntEnum):
    """Process exit statuses."""

    OK = 0
    FAILURES = 1
    ERROR = 127


class NoFiltersConfigured(ConfigError):
    """Raised when the configuration defines no filter for the action."""

    def __init__(self, action: Action) -> None:
        super().__init__(f"No {_noun(action)} commands defined in your config")


class NoFiltersMatchName(ConfigError):
    """Raised when ``--command`` names no configured filter."""

    def __init__(self, action: Action, name: str) -> None:
        """Record the command name that matched nothing.

        Args:
            action: Lint or tidy.
            name: Name given with ``--command``.
        """

        super().__init__(f"No {_noun(action)} commands match the given command name, {name}")
        self.name = name


class NoFiltersMatchLabel(ConfigError):
    """Raised when ``--label`` selects no configured filter."""

    def __init__(self, action: Action, label: str) -> None:
        """Record the label that selected nothing.

        Args:
            action: Lint or tidy.
            label: Label given with ``--label``.
        """

        super().__init__(f"No {_noun(action)} commands match the given label, {label}")
        self.label = label


def _noun(action: Action) -> str:
    return "linting" if action is Action.LINT else "tidying"


def format_duration(seconds: float) -> str:
    """Format ``seconds`` as ``Xm Y.YYs``, ``X.XXs``, ``X.XXms``, ``X.XXus`` or ``Xns``."""

    rounded = round(seconds, 2)
    if rounded >= 60:
        minutes = int(rounded // 60)
        return f"{minutes}m {rounded - minutes * 60:.2f}s"
    if rounded >= 0.01:
        return f"{rounded:.2f}s"
    nanos = int(seconds * 1_000_000_000)
    if nanos > 1_000_000:
        return f"{nanos / 1_000_000:.2f}ms"
    if nanos > 1_000:
        return f"{nanos / 1_000:.2f}us"
    return f"{nanos}ns"


@dataclass(frozen=True, slots=True)
class Exit:
    """Final status of one ``lint`` or ``tidy`` run."""

    status: ExitStatus
    message: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls) -> Exit:
        """Return the status of a run without failures."""

        return cls(ExitStatus.OK)

    @classmethod
    def no_files(cls) -> Exit:
        """Return the status of a git run that found nothing to do."""

        return cls(ExitStatus.OK, message=NO_FILES_MESSAGE)


@dataclass(frozen=True, slots=True)
class _Target:
    """One entry of a filter's path map."""

    path: Path
    files: tuple[Path, ...]


@dataclass(frozen=True, slots=True)
class _Result:
    target: _Target
    outcome: LintOutcome | TidyOutcome | None = None
    error: str | None = None


def path_map(scope: RunScope, files: Sequence[Path], groups: Sequence[Group]) -> list[_Target]:
    """Shape the selected files into invocation targets for ``scope``.

    Args:
        scope: Effective run scope of the filter.
        files: Every selected file, sorted.
        groups: The same files grouped by directory.

    Returns:
        list[_Target]: Targets sorted by path.
    """

    if scope is RunScope.ROOT:
        return [_Target(Path("."), tuple(files))]
    if scope is RunScope.DIRS:
        return [_Target(group.directory, group.files) for group in groups]
    return [_Target(file, (file,)) for file in files]


class Orchestrator:
    """Run lint or tidy filters in declaration order, each across a worker pool."""

    def __init__(
        self,
        loaded: LoadedConfig,
        reporter: Reporter,
        *,
        cwd: Path,
        jobs: int | None = None,
        git: GitClient | None = None,
    ) -> None:
        """Prepare an orchestrator.

        Args:
            loaded: Project configuration and root.
            reporter: Console reporter for result lines.
            cwd: Directory explicit paths are relative to.
            jobs: Worker pool size; defaults to the number of CPUs.
            git: Git client override, mainly for tests.
        """

        self.loaded = loaded
        self.reporter = reporter
        self.cwd = cwd
        self.jobs = jobs or os.cpu_count() or 1
        self.git = git

    def resolve_filters(self, action: Action, *, command: str | None, label: str | None) -> list[Filter]:
        """Return the active filters, failing when none match.

        Raises:
            NoFiltersMatchName: If ``command`` names no configured filter.
            NoFiltersMatchLabel: If ``label`` selects no filter.
            NoFiltersConfigured: If the configuration defines none for ``action``.
        """

        filters = self.loaded.filters(action, command=command, label=label)
        if filters:
            return filters
        if command is not None:
            raise NoFiltersMatchName(action, command)
        if label is not None:
            raise NoFiltersMatchLabel(action, label)
        raise NoFiltersConfigured(action)

    def run(
        self,
        action: Action,
        mode: SelectionMode,
        paths: Sequence[Path] = (),
        *,
        command: str | None = None,
        label: str | None = None,
    ) -> Exit:
        """Execute one ``lint`` or ``tidy`` pass.

        Args:
            action: Lint or tidy.
            mode: How files are selected.
            paths: Explicit paths for path mode.
            command: Only run the filter with this name.
            label: Only run filters with this label.

        Returns:
            Exit: Status ``0`` on success or when there is nothing to do,
            ``1`` when any filter failed.

        Raises:
            ConfigError: If the filters cannot be built or selected.
            SelectionError: If file selection fails.
            ExecError: If git cannot be queried.
        """

        self.reporter.starting("Linting" if action is Action.LINT else "Tidying", str(mode))
        filters = self.resolve_filters(action, command=command, label=label)
        with FileSelector(
            mode,
            self.loaded.project_root,
            cwd=self.cwd,
            exclude=self.loaded.config.exclude,
            git=self.git,
        ) as selector:
            files = selector.select(paths)
            if files is None:
                self.reporter.no_files(NO_FILES_MESSAGE)
                return Exit.no_files()
            groups = make_groups(files)
            failures: list[ActionFailure] = []
            for active in filters:
                LOGGER.debug("Command config for %s: %s", active.name, active.describe())
                failures.extend(self._run_filter(active, action, files, groups))
        if not failures:
            return Exit.ok()
        return Exit(ExitStatus.FAILURES, error=self.reporter.failure_summary(_noun(action), failures))

    def _run_filter(
        self,
        active: Filter,
        action: Action,
        files: Sequence[Path],
        groups: Sequence[Group],
    ) -> list[ActionFailure]:
        scope = active.resolve_scope(files)
        targets = path_map(scope, files, groups)
        start = time.perf_counter()
        results: list[_Result] = []
        with ThreadPoolExecutor(max_workers=self.jobs) as executor:
            future_map = {executor.submit(self._run_target, active, action, target, scope): target for target in targets}
            for future in as_completed(future_map):
                results.append(future.result())
        results.sort(key=lambda result: result.target.path)

        applied = [result for result in results if result.outcome is not None or result.error is not None]
        if applied:
            LOGGER.info(
                "%s with %s on %d path%s, elapsed time = %s",
                "Linting" if action is Action.LINT else "Tidying",
                active.name,
                len(applied),
                "s" if len(applied) > 1 else "",
                format_duration(time.perf_counter() - start),
            )
        return [failure for result in applied if (failure := self._report(active, scope, result)) is not None]

    @staticmethod
    def _run_target(active: Filter, action: Action, target: _Target, scope: RunScope) -> _Result:
        try:
            if action is Action.LINT:
                outcome: LintOutcome | TidyOutcome | None = active.lint(target.path, target.files, scope)
            else:
                outcome = active.tidy(target.path, target.files, scope)
        except (ExecError, FilterError, OSError) as exc:
            LOGGER.debug("%s failed for %s: %s", active.name, target.path, exc)
            return _Result(target, error=str(exc))
        return _Result(target, outcome=outcome)

    def _report(self, active: Filter, scope: RunScope, result: _Result) -> ActionFailure | None:
        target = result.target
        summary = active.paths_summary(target.path, target.files, scope)
        failed_paths: tuple[Path, ...] = (target.path,)
        if scope is not RunScope.FILES:
            failed_paths = tuple(file for file in target.files if active.file_matches_rules(file)) or failed_paths
        if result.error is not None:
            self.reporter.execution_error(active.name, summary)
            return ActionFailure(active.config_key, failed_paths, result.error)
        outcome = result.outcome
        if isinstance(outcome, LintOutcome):
            if outcome.passed:
                self.reporter.passed(active.name, summary)
                return None
            self.reporter.lint_failed(
                active.name,
                summary,
                paths=failed_paths,
                stdout=outcome.stdout,
                stderr=outcome.stderr,
            )
            return ActionFailure(active.config_key, failed_paths, "linting failed")
        if outcome is TidyOutcome.CHANGED:
            self.reporter.tidied(active.name, summary)
        elif outcome is TidyOutcome.UNCHANGED:
            self.reporter.unchanged(active.name, summary)
        else:
            self.reporter.maybe_changed(active.name, summary)
        return None


__all__ = [
    "Exit",
    "ExitStatus",
    "NoFiltersConfigured",
    "NoFiltersMatchLabel",
    "NoFiltersMatchName",
    "Orchestrator",
    "format_duration",
    "path_map",
]
