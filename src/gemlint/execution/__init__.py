# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Subprocess execution with exit-code and stderr policies."""

from __future__ import annotations

from .process import (
    ExecError,
    ExecOutput,
    ExecRequest,
    ExecutableNotFound,
    KilledBySignal,
    UnexpectedExitCode,
    UnexpectedStderr,
    run_process,
)

__all__ = [
    "ExecError",
    "ExecOutput",
    "ExecRequest",
    "ExecutableNotFound",
    "KilledBySignal",
    "UnexpectedExitCode",
    "UnexpectedStderr",
    "run_process",
]
