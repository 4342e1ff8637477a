# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the subprocess execution wrapper."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from gemlint.execution.process import (
    ExecRequest,
    ExecutableNotFound,
    KilledBySignal,
    UnexpectedExitCode,
    UnexpectedStderr,
    run_process,
)


def _sh(script: str, **kwargs) -> ExecRequest:
    return ExecRequest(exe="sh", args=("-c", script), **kwargs)


def test_successful_command_returns_output() -> None:
    output = run_process(_sh("echo hello"))

    assert output.exit_code == 0
    assert output.stdout == "hello\n"
    assert output.stderr is None


def test_empty_output_is_none() -> None:
    output = run_process(_sh("exit 0"))

    assert output.stdout is None
    assert output.stderr is None


def test_unexpected_exit_code_carries_output() -> None:
    with pytest.raises(UnexpectedExitCode) as excinfo:
        run_process(_sh("echo broken; exit 3"))

    assert excinfo.value.code == 3
    assert excinfo.value.stdout == "broken\n"
    assert "unexpected exit code 3" in str(excinfo.value)


def test_accepted_exit_codes_are_returned() -> None:
    output = run_process(_sh("exit 3", ok_exit_codes=frozenset({0, 3})))

    assert output.exit_code == 3


def test_stderr_is_an_error_unless_tolerated() -> None:
    with pytest.raises(UnexpectedStderr):
        run_process(_sh("echo oops >&2"))

    output = run_process(_sh("echo 'warning: oops' >&2", ignore_stderr=(re.compile(r"^warning"),)))
    assert output.stderr == "warning: oops\n"


def test_missing_executable_is_reported() -> None:
    with pytest.raises(ExecutableNotFound) as excinfo:
        run_process(ExecRequest(exe="gemlint-definitely-not-installed"))

    assert excinfo.value.exe == "gemlint-definitely-not-installed"


def test_killed_by_signal() -> None:
    with pytest.raises(KilledBySignal) as excinfo:
        run_process(_sh("kill -9 $$"))

    assert excinfo.value.signal == 9


def test_environment_is_merged() -> None:
    output = run_process(_sh('echo "$GEMLINT_TEST_VALUE"', env={"GEMLINT_TEST_VALUE": "bar"}))

    assert output.stdout == "bar\n"


def test_command_runs_in_requested_directory(tmp_path: Path) -> None:
    output = run_process(_sh("pwd", in_dir=tmp_path))

    assert output.stdout is not None
    assert Path(output.stdout.strip()).resolve() == tmp_path.resolve()
