# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Execution model for one configured lint/tidy command."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from ..constants import ROOT_PLACEHOLDER
from ..execution.process import MATCH_ANY_STDERR, ExecRequest, run_process
from ..paths.matcher import PathMatcher
from .model import (
    Action,
    BothKindRequiresFlags,
    CanOnlyOperateOnDirectories,
    CanOnlyOperateOnFiles,
    FilterKind,
    FilterParams,
    InvalidStderrPattern,
    LintOutcome,
    NoMatchingSubRoot,
    OverlappingExitCodes,
    PathArgStyle,
    PrefixNotFound,
    RunScope,
    TidyOutcome,
    WorkingDirKind,
    WrongFilterKind,
)
from .snapshot import PathSnapshot

LOGGER = logging.getLogger(__name__)

_SUMMARY_LIMIT = 3


def _summary_for_log(paths: Sequence[Path]) -> str:
    shown = " ".join(str(path) for path in paths[:_SUMMARY_LIMIT])
    if len(paths) <= _SUMMARY_LIMIT:
        return shown
    return f"{shown} ... and {len(paths) - _SUMMARY_LIMIT} more"


class Filter:
    """A linter, tidier or both, bound to a project root.

    Instances are immutable after construction and safe to share across
    worker threads.
    """

    def __init__(self, params: FilterParams, project_root: Path) -> None:
        """Compile ``params`` into a runnable filter.

        Args:
            params: Validated filter configuration.
            project_root: Absolute project root.

        Raises:
            BothKindRequiresFlags: If a ``both`` filter has no lint or tidy flags.
            OverlappingExitCodes: If ok and lint-failure exit codes overlap.
            InvalidStderrPattern: If an ``ignore_stderr`` regex is invalid.
            PatternSyntaxError: If an include or exclude pattern is invalid.
        """

        if params.kind is FilterKind.BOTH and not (params.lint_flags or params.tidy_flags):
            raise BothKindRequiresFlags(params.name)
        overlap = params.ok_exit_codes & params.lint_failure_exit_codes
        if overlap:
            raise OverlappingExitCodes(params.name, overlap)

        self.params = params
        self.name = params.name
        self.kind = params.kind
        self.project_root = project_root
        self.includer = PathMatcher.compile(project_root, params.include)
        self.excluder = PathMatcher.compile(project_root, params.exclude)
        self.cmd = tuple(part.replace(ROOT_PLACEHOLDER, str(project_root)) for part in params.cmd)
        self.accepted_exit_codes = params.ok_exit_codes | params.lint_failure_exit_codes
        self.ignore_stderr = self._compile_stderr_patterns(params)

    @staticmethod
    def _compile_stderr_patterns(params: FilterParams) -> tuple[re.Pattern[str], ...]:
        if params.expect_stderr:
            return (MATCH_ANY_STDERR,)
        compiled: list[re.Pattern[str]] = []
        for pattern in params.ignore_stderr:
            try:
                compiled.append(re.compile(pattern))
            except re.error as exc:
                raise InvalidStderrPattern(params.name, pattern, str(exc)) from exc
        return tuple(compiled)

    @property
    def config_key(self) -> str:
        """Return the TOML key this filter was configured under."""

        name = f'"{self.name}"' if " " in self.name else self.name
        return f"commands.{name}"

    def describe(self) -> str:
        """Return a one-line summary of the invocation settings for debug logs."""

        params = self.params
        return f"{params.invoke} | working_dir = {params.working_dir} | path_args = {params.path_args.value!r}"

    def file_matches_rules(self, path: Path) -> bool:
        """Return whether the project-relative file ``path`` is in scope."""

        if self.excluder.matches(path):
            return False
        return self.includer.matches(path)

    def resolve_scope(self, files: Sequence[Path]) -> RunScope:
        """Pick the run scope for this run from the selected ``files``.

        Args:
            files: Every selected project-relative file.

        Returns:
            RunScope: Static scope, or the one chosen by an adaptive threshold.
        """

        matching = [path for path in files if self.file_matches_rules(path)]
        scope = self.params.invoke.scope_for(len(matching), len({path.parent for path in matching}))
        LOGGER.debug("%s runs with scope %s for %d matching file(s)", self.name, scope.value, len(matching))
        return scope

    def should_process(self, path: Path, files: Sequence[Path], scope: RunScope) -> bool:
        """Return whether this filter applies to ``path``.

        Args:
            path: File, directory or ``Path(".")`` being acted on.
            files: Files belonging to ``path``.
            scope: Effective run scope.

        Returns:
            bool: ``True`` when the filter should run.
        """

        if scope is RunScope.FILES:
            if self.excluder.matches(path):
                LOGGER.debug("File %s is excluded for the %s command", path, self.name)
                return False
            return self.includer.matches(path)

        if self.excluder.matches(path, is_directory=True):
            LOGGER.debug("Directory %s is excluded for the %s command", path, self.name)
            return False
        if self.includer.matches(path, is_directory=True):
            return True
        for member in files:
            if self.file_matches_rules(member):
                LOGGER.debug("%s is included for the %s command because it contains %s", path, self.name, member)
                return True
        LOGGER.debug("%s is not included for the %s command because none of its files are", path, self.name)
        return False

    def check_scope(self, path: Path, scope: RunScope) -> None:
        """Reject paths whose type does not fit ``scope``.

        Raises:
            CanOnlyOperateOnDirectories: If a directory run is handed a file.
            CanOnlyOperateOnFiles: If a file run is handed a directory.
        """

        full = self.project_root / path
        if scope is RunScope.DIRS and full.is_file():
            raise CanOnlyOperateOnDirectories(self.name, path)
        if scope is RunScope.FILES and full.is_dir():
            raise CanOnlyOperateOnFiles(self.name, path)

    def working_dir_for(self, path: Path, scope: RunScope) -> Path:
        """Return the absolute directory the subprocess runs in.

        Args:
            path: File, directory or root being acted on.
            scope: Effective run scope.

        Returns:
            Path: Absolute working directory.

        Raises:
            NoMatchingSubRoot: If ``sub_roots`` are declared and ``path`` is
                not under exactly one of them.
        """

        working_dir = self.params.working_dir
        if working_dir.kind is WorkingDirKind.ROOT:
            return self.project_root
        if working_dir.kind is WorkingDirKind.DIR:
            directory = path.parent if scope is RunScope.FILES else path
            return self.project_root / directory
        if working_dir.chdir_to is not None:
            return self.project_root / working_dir.chdir_to
        containing = [root for root in working_dir.sub_roots if path == root or root in path.parents]
        if len(containing) != 1:
            raise NoMatchingSubRoot(self.name, path, working_dir.sub_roots)
        return self.project_root / containing[0]

    def _relative_to(self, path: Path, in_dir: Path) -> str:
        absolute = self.project_root / path
        try:
            relative = absolute.relative_to(in_dir)
        except ValueError as exc:
            raise PrefixNotFound(path, in_dir) from exc
        return str(relative) if relative.parts else "."

    def render_paths(self, path: Path, files: Sequence[Path], scope: RunScope, in_dir: Path) -> list[str]:
        """Render the path arguments for one invocation.

        Args:
            path: File, directory or root being acted on.
            files: Files belonging to ``path``.
            scope: Effective run scope.
            in_dir: Absolute working directory of the subprocess.

        Returns:
            list[str]: Path arguments in command-line order.

        Raises:
            PrefixNotFound: If a relative path is not under ``in_dir``.
        """

        style = self.params.path_args
        if style is PathArgStyle.NONE:
            return []
        if style is PathArgStyle.DOT:
            return ["."]
        targets = [path] if scope is RunScope.FILES else sorted(f for f in files if self.file_matches_rules(f))
        if style in {PathArgStyle.FILE, PathArgStyle.ABSOLUTE_FILE}:
            chosen = targets
        else:
            chosen = sorted({target.parent for target in targets}) if scope is not RunScope.DIRS else [path]
        if style in {PathArgStyle.ABSOLUTE_FILE, PathArgStyle.ABSOLUTE_DIR}:
            return [str(self.project_root / item) if item.parts else str(self.project_root) for item in chosen]
        return [self._relative_to(item, in_dir) for item in chosen]

    def build_invocation(self, paths: Sequence[str], action: Action) -> list[str]:
        """Return the full argv for ``action`` over the rendered ``paths``.

        Args:
            paths: Already-rendered path arguments.
            action: Whether the lint or tidy flags are appended.

        Returns:
            list[str]: Command, flags, then each path with its optional flag.
        """

        argv = list(self.cmd)
        argv.extend(self.params.lint_flags if action is Action.LINT else self.params.tidy_flags)
        for path in paths:
            if self.params.path_flag:
                argv.append(self.params.path_flag)
            argv.append(path)
        return argv

    def _require_kind(self, action: Action) -> None:
        forbidden = FilterKind.TIDY if action is Action.LINT else FilterKind.LINT
        if self.kind is forbidden:
            raise WrongFilterKind(action, self.name, self.kind)

    def _request(self, action: Action, path: Path, files: Sequence[Path], scope: RunScope) -> ExecRequest:
        in_dir = self.working_dir_for(path, scope)
        argv = self.build_invocation(self.render_paths(path, files, scope, in_dir), action)
        request = ExecRequest(
            exe=argv[0],
            args=tuple(argv[1:]),
            env=self.params.env,
            ok_exit_codes=self.accepted_exit_codes,
            ignore_stderr=self.ignore_stderr,
            in_dir=in_dir,
        )
        LOGGER.info(
            "%s [%s] with %s in [%s] using command [%s]",
            "Linting" if action is Action.LINT else "Tidying",
            _summary_for_log(files),
            self.name,
            in_dir,
            request.loggable_command,
        )
        return request

    def lint(self, path: Path, files: Sequence[Path], scope: RunScope) -> LintOutcome | None:
        """Run the linter over ``path``.

        Args:
            path: File, directory or root being acted on.
            files: Files belonging to ``path``.
            scope: Effective run scope.

        Returns:
            LintOutcome | None: Outcome, or ``None`` when the filter does not
            apply to ``path``.

        Raises:
            WrongFilterKind: If this filter only tidies.
            ExecError: If the command cannot run or behaves unexpectedly.
        """

        self._require_kind(Action.LINT)
        self.check_scope(path, scope)
        if not self.should_process(path, files, scope):
            return None
        output = run_process(self._request(Action.LINT, path, files, scope))
        return LintOutcome(
            passed=output.exit_code not in self.params.lint_failure_exit_codes,
            stdout=output.stdout,
            stderr=output.stderr,
        )

    def tidy(self, path: Path, files: Sequence[Path], scope: RunScope) -> TidyOutcome | None:
        """Run the tidier over ``path`` and report whether it changed anything.

        Args:
            path: File, directory or root being acted on.
            files: Files belonging to ``path``.
            scope: Effective run scope.

        Returns:
            TidyOutcome | None: Outcome, or ``None`` when the filter does not
            apply to ``path``.

        Raises:
            WrongFilterKind: If this filter only lints.
            ExecError: If the command cannot run or behaves unexpectedly.
        """

        self._require_kind(Action.TIDY)
        self.check_scope(path, scope)
        if not self.should_process(path, files, scope):
            return None
        snapshot = None
        if scope is not RunScope.ROOT:
            snapshot = PathSnapshot.capture(self.project_root, path, self.file_matches_rules)
        run_process(self._request(Action.TIDY, path, files, scope))
        if snapshot is None:
            return TidyOutcome.INDETERMINATE
        return TidyOutcome.CHANGED if snapshot.changed(self.file_matches_rules) else TidyOutcome.UNCHANGED

    def paths_summary(self, path: Path, files: Sequence[Path], scope: RunScope) -> str:
        """Return the short description of ``path`` used in result lines."""

        if scope is RunScope.FILES:
            return str(path)
        members = sorted(f for f in files if self.file_matches_rules(f)) or sorted(files)
        everything = " ".join(str(member) for member in members)
        if len(members) <= _SUMMARY_LIMIT:
            return everything
        initial = " ".join(str(member) for member in members[:2])
        return f"{len(members)} files matching {' '.join(self.params.include)}, starting with {initial}"


__all__ = ["Filter"]
