# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for configuration models, discovery and loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from gemlint.config.loader import CannotFindRoot, ConfigFileError, LoadedConfig, find_project_root, load_config
from gemlint.config.models import CannotMixOldAndNewParams, CommandConfig, InvalidInvocationCombination
from gemlint.filters.model import (
    Action,
    FilterKind,
    Invoke,
    InvokeStrategy,
    OverlappingExitCodes,
    PathArgStyle,
    WorkingDir,
    WorkingDirKind,
)

SAMPLE = """
exclude = ["target", "vendor/"]

[commands.rustfmt]
type = "both"
include = "*.rs"
cmd = ["rustfmt", "--edition", "2021"]
lint-flags = "--check"
ok-exit-codes = 0
lint-failure-exit-codes = 1

[commands.clippy]
type = "lint"
include = "*.rs"
invoke = "once"
path-args = "none"
cmd = ["cargo", "clippy"]
labels = ["slow"]

[commands."omega tidy"]
type = "tidy"
include = ["*.py"]
cmd = ["black"]
"""


def _command(**values) -> CommandConfig:
    data = {"type": "lint", "include": "*.py", "cmd": "tool"}
    data.update(values)
    return CommandConfig.model_validate(data)


def test_defaults_translate_to_per_file_from_root() -> None:
    invoke, working_dir, path_args = _command().invocation("tool")

    assert invoke == Invoke(InvokeStrategy.PER_FILE)
    assert working_dir == WorkingDir.root()
    assert path_args is PathArgStyle.FILE


@pytest.mark.parametrize(
    ("run_mode", "chdir", "expected"),
    [
        ("files", False, (InvokeStrategy.PER_FILE, WorkingDirKind.ROOT, PathArgStyle.FILE)),
        ("files", True, (InvokeStrategy.PER_FILE, WorkingDirKind.DIR, PathArgStyle.FILE)),
        ("dirs", False, (InvokeStrategy.PER_DIR, WorkingDirKind.ROOT, PathArgStyle.DIR)),
        ("dirs", True, (InvokeStrategy.PER_DIR, WorkingDirKind.DIR, PathArgStyle.NONE)),
        ("root", False, (InvokeStrategy.ONCE, WorkingDirKind.ROOT, PathArgStyle.DOT)),
        ("root", True, (InvokeStrategy.ONCE, WorkingDirKind.ROOT, PathArgStyle.NONE)),
    ],
)
def test_legacy_run_mode_translation(run_mode: str, chdir: bool, expected: tuple) -> None:
    invoke, working_dir, path_args = _command(run_mode=run_mode, chdir=chdir).invocation("tool")

    assert (invoke.strategy, working_dir.kind, path_args) == expected


def test_legacy_and_new_keys_cannot_be_mixed() -> None:
    with pytest.raises(CannotMixOldAndNewParams):
        _command(run_mode="dirs", invoke="per-dir").invocation("tool")


@pytest.mark.parametrize(
    "values",
    [
        {"invoke": "per-file", "path_args": "dir"},
        {"invoke": "per-dir", "path_args": "dot"},
        {"invoke": "per-dir", "working_dir": {"chdir_to": "sub"}, "path_args": "none"},
        {"invoke": "once", "working_dir": "dir"},
    ],
)
def test_invalid_invocation_combinations(values: dict) -> None:
    with pytest.raises(InvalidInvocationCombination):
        _command(**values).invocation("tool")


def test_per_dir_in_each_directory_may_omit_paths() -> None:
    invoke, working_dir, path_args = _command(invoke="per-dir", working_dir="dir", path_args="none").invocation("tool")

    assert invoke.strategy is InvokeStrategy.PER_DIR
    assert working_dir.kind is WorkingDirKind.DIR
    assert path_args is PathArgStyle.NONE


def test_threshold_invoke_and_sub_roots() -> None:
    invoke, working_dir, _ = _command(
        invoke={"per-file-or-dir": 5},
        working_dir={"sub_roots": ["app", "lib"]},
    ).invocation("tool")

    assert invoke == Invoke(InvokeStrategy.PER_FILE_OR_DIR, 5)
    assert working_dir.sub_roots == (Path("app"), Path("lib"))


@pytest.mark.parametrize(
    "values",
    [
        {"invoke": "sometimes"},
        {"invoke": {"per-file-or-dir": 0}},
        {"working_dir": {"elsewhere": "x"}},
        {"ok_exit_codes": [0, 256]},
        {"ok_exit_codes": [True]},
        {"cmd": []},
        {"unknown": 1},
    ],
)
def test_invalid_values_fail_validation(values: dict) -> None:
    with pytest.raises(ValidationError):
        _command(**values)


def test_strings_and_ints_are_coerced_to_lists() -> None:
    command = _command(cmd="tool", ok_exit_codes=2, lint_flags="--check")

    assert command.cmd == ("tool",)
    assert command.ok_exit_codes == (2,)
    assert command.lint_flags == ("--check",)


def test_commands_without_labels_carry_the_default_label() -> None:
    assert _command().matches_label("default")
    assert not _command().matches_label("slow")
    assert _command(labels=["slow"]).matches_label("slow")
    assert not _command(labels=["slow"]).matches_label("default")


def test_load_config_preserves_declaration_order(tmp_path: Path) -> None:
    path = tmp_path / "gemlint.toml"
    path.write_text(SAMPLE, encoding="utf-8")

    config = load_config(path)

    assert list(config.commands) == ["rustfmt", "clippy", "omega tidy"]
    assert config.exclude == ("target", "vendor/")
    assert config.commands["rustfmt"].kind is FilterKind.BOTH
    assert config.commands["rustfmt"].lint_failure_exit_codes == (1,)


def test_invalid_toml_is_a_config_error(tmp_path: Path) -> None:
    path = tmp_path / "gemlint.toml"
    path.write_text("[commands\n", encoding="utf-8")

    with pytest.raises(ConfigFileError):
        load_config(path)


def test_project_root_discovery(tmp_path: Path) -> None:
    checkout = tmp_path / "checkout"
    nested = checkout / "src" / "deep"
    nested.mkdir(parents=True)
    (checkout / ".git").mkdir()

    assert find_project_root(None, nested) == checkout.resolve()

    (nested / "gemlint.toml").write_text("", encoding="utf-8")
    assert find_project_root(None, nested) == nested.resolve()
    assert find_project_root(Path("../gemlint.toml"), nested) == (nested / "..").resolve()


def test_missing_root_is_reported(tmp_path: Path) -> None:
    with pytest.raises(CannotFindRoot):
        find_project_root(None, tmp_path)


def test_filters_follow_action_label_and_name(tmp_path: Path) -> None:
    (tmp_path / "gemlint.toml").write_text(SAMPLE, encoding="utf-8")
    loaded = LoadedConfig.discover(tmp_path)

    assert [active.name for active in loaded.filters(Action.LINT)] == ["rustfmt"]
    assert [active.name for active in loaded.filters(Action.TIDY)] == ["rustfmt", "omega tidy"]
    assert [active.name for active in loaded.filters(Action.LINT, label="slow")] == ["clippy"]
    assert [active.name for active in loaded.filters(Action.TIDY, command="omega tidy")] == ["omega tidy"]
    assert loaded.filters(Action.LINT, command="missing") == []


def test_overlapping_exit_codes_fail_when_filters_are_built(tmp_path: Path) -> None:
    (tmp_path / "gemlint.toml").write_text(
        """
[commands.bad]
type = "lint"
include = "*.py"
cmd = "tool"
ok_exit_codes = [0, 1]
lint_failure_exit_codes = [1]
""",
        encoding="utf-8",
    )

    with pytest.raises(OverlappingExitCodes):
        LoadedConfig.discover(tmp_path).filters(Action.LINT)
