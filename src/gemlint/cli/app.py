# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typer application exposing ``lint``, ``tidy`` and ``config list``."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from ..config.init import InitComponent, detect_components, write_config_files
from ..config.loader import LoadedConfig
from ..constants import CONFIG_FILE_NAMES
from ..errors import ConfigError, SelectionError
from ..execution.process import ExecError
from ..filters.model import Action
from ..logging import detect_tty, fail, get_console_manager, info, init_logging, print_line, section
from ..orchestration.orchestrator import Exit, ExitStatus, Orchestrator
from ..paths.mode import SelectionMode
from ..reporting.console import Reporter


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = ExitStatus.ERROR) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class GlobalOptions:
    """Options given before the sub-command."""

    config: Path | None = None
    jobs: int | None = None
    ascii: bool = False
    quiet: bool = False
    color: bool = True

    def reporter(self) -> Reporter:
        return Reporter(use_ascii=self.ascii, quiet=self.quiet, color=self.color and detect_tty())


app = typer.Typer(
    name="gemlint",
    help="One code quality tool to rule them all.",
    no_args_is_help=True,
    add_completion=False,
)
config_app = typer.Typer(help="Inspect or create the configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Annotated[Path | None, typer.Option("--config", "-c", help="Path to the gemlint config file.")] = None,
    jobs: Annotated[
        int | None,
        typer.Option("--jobs", "-j", min=1, help="Number of parallel jobs (defaults to one per core)."),
    ] = None,
    ascii: Annotated[bool, typer.Option("--ascii", help="Replace emoji with plain ASCII symbols.")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Suppress most output.")] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable ANSI colours.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output.")] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Enable debugging output.")] = False,
) -> None:
    """Configure logging and stash the global options on the context."""

    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    init_logging(level)
    ctx.obj = GlobalOptions(config=config, jobs=jobs, ascii=ascii, quiet=quiet, color=not no_color)


def _selection_mode(
    *,
    all_files: bool,
    git: bool,
    staged: bool,
    git_diff_from: str | None,
    staged_with_stash: bool,
    paths: list[Path],
) -> SelectionMode:
    """Return the single selection mode requested on the command line.

    Raises:
        typer.BadParameter: Unless exactly one mode (or a path list) was given.
    """

    chosen = [
        mode
        for flag, mode in (
            (all_files, SelectionMode.all),
            (git, SelectionMode.git_modified),
            (staged, SelectionMode.git_staged),
            (staged_with_stash, SelectionMode.git_staged_with_stash),
            (bool(paths), SelectionMode.from_explicit_paths),
        )
        if flag
    ]
    if git_diff_from is not None:
        chosen.append(lambda: SelectionMode.git_diff_from(git_diff_from))
    if len(chosen) != 1:
        raise typer.BadParameter(
            "exactly one of --all, --git, --staged, --git-diff-from, --staged-with-stash or a list of paths is required",
        )
    return chosen[0]()


def _execute(
    options: GlobalOptions,
    reporter: Reporter,
    action: Action,
    mode: SelectionMode,
    paths: list[Path],
    *,
    command: str | None,
    label: str | None,
) -> Exit:
    """Load the configuration and run the orchestrator.

    Raises:
        CLIError: If configuration, selection or git access fails.
    """

    cwd = Path.cwd()
    try:
        loaded = LoadedConfig.discover(cwd, options.config)
        return Orchestrator(loaded, reporter, cwd=cwd, jobs=options.jobs).run(
            action,
            mode,
            paths,
            command=command,
            label=label,
        )
    except (ConfigError, SelectionError, ExecError) as exc:
        raise CLIError(str(exc)) from exc


def _run(
    ctx: typer.Context,
    action: Action,
    *,
    command: str | None,
    label: str | None,
    mode: SelectionMode,
    paths: list[Path],
) -> None:
    options: GlobalOptions = ctx.obj
    reporter = options.reporter()
    try:
        result = _execute(options, reporter, action, mode, paths, command=command, label=label)
    except CLIError as exc:
        fail(str(exc), use_emoji=not options.ascii, use_color=reporter.color)
        raise typer.Exit(code=exc.exit_code) from exc
    if result.error:
        reporter.error(result.error)
    raise typer.Exit(code=int(result.status))


CommandOpt = Annotated[
    str | None,
    typer.Option("--command", help="Only run the command with this name from the config file."),
]
LabelOpt = Annotated[
    str | None,
    typer.Option("--label", help='Only run commands with this label (default: commands labelled "default").'),
]
AllOpt = Annotated[bool, typer.Option("--all", "-a", help="Run against all files in the project.")]
GitOpt = Annotated[bool, typer.Option("--git", "-g", help="Run against files modified according to git.")]
StagedOpt = Annotated[bool, typer.Option("--staged", "-s", help="Run against files staged for a git commit.")]
DiffFromOpt = Annotated[
    str | None,
    typer.Option("--git-diff-from", "-d", metavar="REF", help="Run against files changed compared with REF."),
]
StashOpt = Annotated[
    bool,
    typer.Option("--staged-with-stash", help="Run against staged content, stashing unstaged changes first."),
]
PathsArg = Annotated[list[Path] | None, typer.Argument(help="Paths to operate on.")]


def _action_command(action: Action) -> Callable[..., None]:
    def run_action(
        ctx: typer.Context,
        command: CommandOpt = None,
        label: LabelOpt = None,
        all_files: AllOpt = False,
        git: GitOpt = False,
        staged: StagedOpt = False,
        git_diff_from: DiffFromOpt = None,
        staged_with_stash: StashOpt = False,
        paths: PathsArg = None,
    ) -> None:
        requested = list(paths or [])
        mode = _selection_mode(
            all_files=all_files,
            git=git,
            staged=staged,
            git_diff_from=git_diff_from,
            staged_with_stash=staged_with_stash,
            paths=requested,
        )
        _run(ctx, action, command=command, label=label, mode=mode, paths=requested)

    run_action.__doc__ = "Run linters." if action is Action.LINT else "Run tidiers (formatters)."
    return run_action


app.command("lint")(_action_command(Action.LINT))
app.command("tidy")(_action_command(Action.TIDY))
app.command("fix", hidden=True)(_action_command(Action.TIDY))


@config_app.command("list")
def config_list(ctx: typer.Context) -> None:
    """List the configured commands."""

    options: GlobalOptions = ctx.obj
    try:
        loaded = LoadedConfig.discover(Path.cwd(), options.config)
    except ConfigError as exc:
        fail(str(exc), use_emoji=not options.ascii)
        raise typer.Exit(code=ExitStatus.ERROR) from exc

    use_color = options.color and detect_tty()
    info(f"Found config file at: {loaded.config_file}", use_emoji=not options.ascii, use_color=use_color)
    section("Commands", use_color=use_color)
    table = Table("Name", "Type", "Runs")
    for name, entry in loaded.config.commands.items():
        table.add_row(name, entry.kind.value, " ".join(entry.cmd))
    get_console_manager().get(color=use_color, emoji=not options.ascii).print(table)


@config_app.command("init")
def config_init(
    ctx: typer.Context,
    component: Annotated[
        list[InitComponent] | None,
        typer.Option("--component", "-c", help="Component to generate config for; may be repeated."),
    ] = None,
    auto: Annotated[
        bool,
        typer.Option("--auto", "-a", help="Pick components from the files found under the current directory."),
    ] = False,
    path: Annotated[Path, typer.Option("--path", "-p", help="Config file to create.")] = Path(CONFIG_FILE_NAMES[0]),
) -> None:
    """Write a starter config file for the given components."""

    options: GlobalOptions = ctx.obj
    if bool(component) == auto:
        raise typer.BadParameter("exactly one of --component or --auto is required")

    cwd = Path.cwd()
    use_emoji = not options.ascii
    use_color = options.color and detect_tty()
    components = detect_components(cwd) if auto else list(component or [])
    try:
        result = write_config_files(path, components, cwd=cwd)
    except (ConfigError, OSError) as exc:
        fail(f"Failed to initialize config files: {exc}", use_emoji=use_emoji, use_color=use_color)
        raise typer.Exit(code=ExitStatus.ERROR) from exc

    info(f"Wrote {result.config_path}", use_emoji=use_emoji, use_color=use_color)
    if result.written or result.skipped:
        section("Support files", use_color=use_color)
        for written in result.written:
            print_line(f"{written} ... generated", use_emoji=use_emoji, use_color=use_color)
        for skipped in result.skipped:
            print_line(
                f"{skipped} ... already exists, skipping - delete this file if you want to regenerate it",
                use_emoji=use_emoji,
                use_color=use_color,
            )
    if result.tool_urls:
        section(f"The generated {result.config_path} requires these tools", use_color=use_color)
        for url in result.tool_urls:
            print_line(f"  {url}", use_emoji=use_emoji, use_color=use_color)


def main() -> None:
    """Console-script entry point."""

    app(prog_name="gemlint")


__all__ = ["CLIError", "GlobalOptions", "app", "main"]
