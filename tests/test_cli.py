# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI tests for the lint, tidy and config commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from gemlint.cli.app import app

CONFIG = """
[commands.check]
type = "lint"
include = "*.py"
cmd = ["sh", "-c", "grep -q bad \\"$1\\" && echo found bad && exit 1; exit 0", "sh"]
lint_failure_exit_codes = 1

[commands.fmt]
type = "tidy"
include = "*.py"
cmd = ["sh", "-c", "printf 'good\\\\n' > \\"$1\\"", "sh"]
"""


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    (tmp_path / "gemlint.toml").write_text(CONFIG, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
    return tmp_path


def test_lint_all_passes(project: Path) -> None:
    (project / "ok.py").write_text("good\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["--ascii", "lint", "--all"])

    assert result.exit_code == 0, result.output
    assert "Passed check: ok.py" in result.output


def test_lint_failure_exits_one_with_summary(project: Path) -> None:
    (project / "ok.py").write_text("good\n", encoding="utf-8")
    (project / "broken.py").write_text("bad\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["--ascii", "lint", "--all"])

    assert result.exit_code == 1
    assert "Failed check: broken.py" in result.output
    assert "found bad" in result.output
    assert "Error when linting files:" in result.output
    assert "[commands.check] failed for [broken.py]" in result.output


def test_github_actions_annotation(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (project / "broken.py").write_text("bad\n", encoding="utf-8")
    monkeypatch.setenv("GITHUB_ACTIONS", "true")

    result = CliRunner().invoke(app, ["lint", "broken.py"])

    assert result.exit_code == 1
    assert "::error file=broken.py::Linting with check failed" in result.output


def test_tidy_and_fix_alias(project: Path) -> None:
    target = project / "messy.py"
    target.write_text("bad\n", encoding="utf-8")

    first = CliRunner().invoke(app, ["--ascii", "tidy", "messy.py"])
    second = CliRunner().invoke(app, ["--ascii", "fix", "messy.py"])

    assert first.exit_code == 0, first.output
    assert "Tidied by fmt:" in first.output
    assert target.read_text(encoding="utf-8") == "good\n"
    assert second.exit_code == 0, second.output
    assert "Unchanged by fmt: messy.py" in second.output


def test_command_option_limits_filters(project: Path) -> None:
    (project / "broken.py").write_text("bad\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["lint", "--command", "fmt", "--all"])

    assert result.exit_code == 127
    assert "No linting commands match the given command name, fmt" in result.output


@pytest.mark.parametrize("args", [["lint"], ["lint", "--all", "--git"], ["lint", "--all", "ok.py"]])
def test_exactly_one_selection_mode_is_required(project: Path, args: list[str]) -> None:
    (project / "ok.py").write_text("good\n", encoding="utf-8")

    result = CliRunner().invoke(app, args)

    assert result.exit_code == 2


def test_missing_path_exits_127(project: Path) -> None:
    result = CliRunner().invoke(app, ["lint", "missing.py"])

    assert result.exit_code == 127
    assert "You passed a path that does not exist: missing.py" in result.output


def test_no_config_or_checkout_exits_127(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(app, ["lint", "--all"])

    assert result.exit_code == 127
    assert "Could not find a config file" in result.output


def test_config_list(project: Path) -> None:
    result = CliRunner().invoke(app, ["--ascii", "config", "list"])

    assert result.exit_code == 0, result.output
    assert f"Found config file at: {project / 'gemlint.toml'}" in result.output
    assert "check" in result.output
    assert "fmt" in result.output


def test_config_init_writes_components(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(app, ["--ascii", "config", "init", "--component", "rust", "-c", "shell"])

    assert result.exit_code == 0, result.output
    assert "Wrote gemlint.toml" in result.output
    assert "https://doc.rust-lang.org/clippy/" in result.output
    text = (tmp_path / "gemlint.toml").read_text(encoding="utf-8")
    assert "[commands.clippy]" in text
    assert "[commands.shfmt]" in text


def test_config_init_auto_detects_components(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "foo.rs").write_text("", encoding="utf-8")
    (tmp_path / "README.md").write_text("", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(app, ["--ascii", "config", "init", "--auto", "--path", "custom.toml"])

    assert result.exit_code == 0, result.output
    text = (tmp_path / "custom.toml").read_text(encoding="utf-8")
    assert "[commands.clippy]" in text
    assert "[commands.prettier-markdown]" in text


def test_config_init_refuses_to_overwrite(project: Path) -> None:
    before = (project / "gemlint.toml").read_text(encoding="utf-8")

    result = CliRunner().invoke(app, ["--ascii", "config", "init", "--component", "rust"])

    assert result.exit_code == 127
    assert "A file already exists at the given path: gemlint.toml" in result.output
    assert (project / "gemlint.toml").read_text(encoding="utf-8") == before


@pytest.mark.parametrize("args", [["config", "init"], ["config", "init", "--auto", "--component", "go"]])
def test_config_init_needs_exactly_one_source(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, args: list[str]) -> None:
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(app, args)

    assert result.exit_code == 2
    assert not (tmp_path / "gemlint.toml").exists()
