# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the git client using a stubbed runner."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from gemlint.execution.process import ExecError
from gemlint.vcs.git import GitClient


class _RecordingRunner:
    def __init__(self, responses: dict[tuple[str, ...], str | Exception]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, ...]] = []

    def __call__(self, args: Sequence[str], cwd: Path) -> str:
        key = tuple(args)
        self.calls.append(key)
        response = self.responses.get(key, "")
        if isinstance(response, Exception):
            raise response
        return response


def test_modified_files_uses_diff_against_head(tmp_path: Path) -> None:
    runner = _RecordingRunner({("diff", "--name-only", "--diff-filter=ACM", "HEAD"): "a.py\n\nsub/b.py\n"})
    client = GitClient(tmp_path, runner=runner)

    assert client.modified_files() == ["a.py", "sub/b.py"]


def test_files_changed_since_uses_merge_base_syntax(tmp_path: Path) -> None:
    runner = _RecordingRunner({})
    GitClient(tmp_path, runner=runner).files_changed_since("main")

    assert runner.calls == [("diff", "--name-only", "--diff-filter=ACM", "main...")]


def test_repo_root_is_none_when_git_fails(tmp_path: Path) -> None:
    runner = _RecordingRunner({("rev-parse", "--show-toplevel"): ExecError("not a repo")})

    assert GitClient(tmp_path, runner=runner).repo_root() is None


def test_nothing_to_stash_yields_an_inert_guard(tmp_path: Path) -> None:
    runner = _RecordingRunner({("stash", "--keep-index"): "No local changes to save\n"})
    guard = GitClient(tmp_path, runner=runner).stash_unstaged()

    assert not guard.active
    guard.release()
    assert ("stash", "pop") not in runner.calls


def test_stash_guard_pops_exactly_once(tmp_path: Path) -> None:
    runner = _RecordingRunner({("stash", "--keep-index"): "Saved working directory\n"})
    client = GitClient(tmp_path, runner=runner)

    with client.stash_unstaged() as guard:
        assert guard.active
    guard.release()

    assert runner.calls.count(("stash", "pop")) == 1
    assert not guard.active


def test_stash_pop_failure_is_not_raised(tmp_path: Path) -> None:
    runner = _RecordingRunner(
        {
            ("stash", "--keep-index"): "Saved working directory\n",
            ("stash", "pop"): ExecError("conflict"),
        },
    )
    guard = GitClient(tmp_path, runner=runner).stash_unstaged()

    guard.release()

    assert not guard.active


def test_merge_in_progress_checks_merge_mode(tmp_path: Path) -> None:
    client = GitClient(tmp_path, runner=_RecordingRunner({}))
    (tmp_path / ".git").mkdir()

    assert not client.merge_in_progress(tmp_path)
    (tmp_path / ".git" / "MERGE_MODE").write_text("", encoding="utf-8")
    assert client.merge_in_progress(tmp_path)
