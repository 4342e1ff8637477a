# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for console reporting and logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from gemlint.logging import PACKAGE_LOGGER_NAME, init_logging
from gemlint.reporting.console import BORING_GLYPHS, FUN_GLYPHS, ActionFailure, Reporter


def test_failure_summary_lists_each_failure() -> None:
    reporter = Reporter(use_ascii=True, color=False, env={})
    failures = [
        ActionFailure("commands.check", (Path("a.py"),), "linting failed"),
        ActionFailure('commands."my tool"', (Path("b.py"), Path("c.py")), "Got unexpected exit code 2"),
    ]

    summary = reporter.failure_summary("tidying", failures)

    assert summary.splitlines() == [
        "Errors when tidying files:",
        "  * [commands.check] failed for [a.py]",
        "    linting failed",
        '  * [commands."my tool"] failed for [b.py c.py]',
        "    Got unexpected exit code 2",
    ]


def test_glyph_sets() -> None:
    assert Reporter(use_ascii=True).glyphs is BORING_GLYPHS
    assert Reporter().glyphs is FUN_GLYPHS


def test_quiet_only_prints_failures(capsys: pytest.CaptureFixture[str]) -> None:
    reporter = Reporter(use_ascii=True, quiet=True, color=False, env={})

    reporter.passed("check", "a.py")
    reporter.tidied("fmt", "a.py")
    reporter.lint_failed("check", "b.py", paths=(Path("b.py"),), stdout="bad line\n", stderr=None)
    reporter.execution_error("check", "c.py")

    out = capsys.readouterr().out
    assert "Passed" not in out
    assert "Tidied" not in out
    assert "* Failed check: b.py" in out
    assert "bad line" in out
    assert "! Error from check: c.py" in out
    assert "::error" not in out


def test_github_annotation_for_many_paths(capsys: pytest.CaptureFixture[str]) -> None:
    reporter = Reporter(use_ascii=True, color=False, env={"GITHUB_ACTIONS": "true"})

    reporter.lint_failed("check", "2 files", paths=(Path("a.py"), Path("b.py")), stdout=None, stderr=None)

    assert "::error::Linting with check failed" in capsys.readouterr().out


def test_init_logging_installs_one_handler() -> None:
    first = init_logging(logging.INFO)
    handlers = list(first.handlers)
    second = init_logging(logging.DEBUG)

    assert first is second is logging.getLogger(PACKAGE_LOGGER_NAME)
    assert second.handlers == handlers
    assert second.level == logging.DEBUG
    assert not second.propagate
