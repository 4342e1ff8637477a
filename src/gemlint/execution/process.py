# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import logging
import os
import re
import shutil

# Bandit: subprocess usage is intentional; commands come from the project
# configuration and are executed as argument lists without a shell.
import subprocess  # nosec B404 suppression_valid: Shell-free subprocess wrapper enforces safe execution.
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

LOGGER = logging.getLogger(__name__)

MATCH_ANY_STDERR: Final[re.Pattern[str]] = re.compile(".*", re.DOTALL)


class ExecError(RuntimeError):
    """Base class for failures reported by :func:`run_process`."""


class ExecutableNotFound(ExecError):
    """Raised when the executable cannot be resolved on ``PATH``."""

    def __init__(self, exe: str, path: str) -> None:
        """Initialise the error with the missing executable.

        Args:
            exe: Executable name as configured.
            path: ``PATH`` value searched at the time of the lookup.
        """

        super().__init__(f'Could not find "{exe}" in your path ({path})')
        self.exe = exe
        self.path = path


class UnexpectedExitCode(ExecError):
    """Raised when a process exits with a code outside the accepted set."""

    def __init__(self, command: str, code: int, stdout: str, stderr: str) -> None:
        """Initialise the error with the captured process output.

        Args:
            command: Loggable command line.
            code: Exit status reported by the process.
            stdout: Captured standard output.
            stderr: Captured standard error.
        """

        super().__init__(f"Got unexpected exit code {code} from `{command}`.{_output_summary(stdout, stderr)}")
        self.command = command
        self.code = code
        self.stdout = stdout
        self.stderr = stderr


class KilledBySignal(ExecError):
    """Raised when a process is terminated by a POSIX signal."""

    def __init__(self, command: str, signal: int) -> None:
        """Initialise the error with the terminating signal.

        Args:
            command: Loggable command line.
            signal: Signal number that ended the process.
        """

        super().__init__(f"Ran `{command}` and it was killed by signal {signal}")
        self.command = command
        self.signal = signal


class UnexpectedStderr(ExecError):
    """Raised when a process writes to stderr and no tolerance pattern matches."""

    def __init__(self, command: str, stderr: str) -> None:
        """Initialise the error with the unexpected stderr payload.

        Args:
            command: Loggable command line.
            stderr: Captured standard error.
        """

        super().__init__(f"Got unexpected stderr output from `{command}`:\n{stderr}")
        self.command = command
        self.stderr = stderr


@dataclass(frozen=True, slots=True)
class ExecOutput:
    """Exit status and captured output of a finished process."""

    exit_code: int
    stdout: str | None
    stderr: str | None


@dataclass(frozen=True, slots=True)
class ExecRequest:
    """Everything needed to spawn one external command."""

    exe: str
    args: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    ok_exit_codes: frozenset[int] = frozenset({0})
    ignore_stderr: tuple[re.Pattern[str], ...] = ()
    in_dir: Path | None = None

    @property
    def loggable_command(self) -> str:
        """Return the command line joined for log output."""

        return " ".join((self.exe, *self.args))


def _output_summary(stdout: str, stderr: str) -> str:
    """Return a readable block describing captured process output.

    Args:
        stdout: Captured standard output.
        stderr: Captured standard error.

    Returns:
        str: Multi-line summary used in error messages.
    """

    summary = "\nStdout was empty." if not stdout else f"\nStdout:\n{stdout}"
    summary += "\nStderr was empty." if not stderr else f"\nStderr:\n{stderr}"
    return f"{summary}\n"


def _resolve_executable(exe: str, env: Mapping[str, str] | None) -> str:
    """Resolve ``exe`` against ``PATH`` before spawning it.

    Args:
        exe: Executable name or path.
        env: Environment used for the child; its ``PATH`` wins when present.

    Returns:
        str: Absolute path to the executable.

    Raises:
        ExecutableNotFound: If the executable cannot be found.
    """

    search_path = (env or {}).get("PATH", os.environ.get("PATH", ""))
    resolved = shutil.which(exe, path=search_path)
    if resolved is None:
        raise ExecutableNotFound(exe, search_path)
    return resolved


def _stderr_is_tolerated(stderr: str, ignore_stderr: Sequence[re.Pattern[str]]) -> bool:
    """Return whether any tolerance pattern accepts ``stderr``.

    Args:
        stderr: Captured standard error text.
        ignore_stderr: Compiled tolerance patterns.

    Returns:
        bool: ``True`` when at least one pattern matches.
    """

    return any(pattern.search(stderr) for pattern in ignore_stderr)


def run_process(request: ExecRequest) -> ExecOutput:
    """Execute ``request`` and classify the result.

    Args:
        request: Command, environment and acceptance rules.

    Returns:
        ExecOutput: Exit code with stdout/stderr (``None`` when empty).

    Raises:
        ExecutableNotFound: If the executable is not on ``PATH``.
        UnexpectedExitCode: If the exit code is not in ``ok_exit_codes``.
        KilledBySignal: If the process was terminated by a signal.
        UnexpectedStderr: If stderr is non-empty and not tolerated.
    """

    env: dict[str, str] = dict(os.environ)
    env.update({str(key): str(value) for key, value in request.env.items()})
    executable = _resolve_executable(request.exe, env)
    cwd = (request.in_dir or Path.cwd()).resolve()
    command = request.loggable_command
    LOGGER.debug("Running command [%s] with cwd = %s", command, cwd)

    # Bandit: arguments come from vetted configuration and no shell is involved.
    completed = subprocess.run(  # nosec B603 - controlled arguments, not user supplied
        [executable, *request.args],
        cwd=str(cwd),
        env=env,
        check=False,
        capture_output=True,
        text=True,
        errors="replace",
        stdin=subprocess.DEVNULL,
    )
    stdout = completed.stdout or ""
    stderr = completed.stderr or ""

    if completed.returncode < 0:
        LOGGER.debug("Ran %s which exited because of signal %d", command, -completed.returncode)
        raise KilledBySignal(command, -completed.returncode)
    LOGGER.debug("Ran %s and got exit code of %d", command, completed.returncode)
    if completed.returncode not in request.ok_exit_codes:
        raise UnexpectedExitCode(command, completed.returncode, stdout, stderr)

    if stdout:
        LOGGER.debug("Stdout was:\n%s", stdout)
    if stderr:
        LOGGER.debug("Stderr was:\n%s", stderr)
        if not _stderr_is_tolerated(stderr, request.ignore_stderr):
            raise UnexpectedStderr(command, stderr)

    return ExecOutput(exit_code=completed.returncode, stdout=stdout or None, stderr=stderr or None)


__all__ = [
    "ExecError",
    "ExecOutput",
    "ExecRequest",
    "ExecutableNotFound",
    "KilledBySignal",
    "MATCH_ANY_STDERR",
    "UnexpectedExitCode",
    "UnexpectedStderr",
    "run_process",
]
