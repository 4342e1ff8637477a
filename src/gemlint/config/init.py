# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Starter configuration files for common languages and file types."""

from __future__ import annotations

import logging
import stat
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..constants import ROOT_PLACEHOLDER
from ..errors import ConfigError
from ..paths.ignore import IgnoreWalker

LOGGER = logging.getLogger(__name__)


class InitComponent(str, Enum):
    """Languages and file types a starter configuration can cover."""

    GO = "go"
    PERL = "perl"
    RUST = "rust"
    GITIGNORE = "gitignore"
    MARKDOWN = "markdown"
    SHELL = "shell"
    TOML = "toml"
    YAML = "yaml"


class FileExists(ConfigError):
    """Raised when the configuration file to write is already present."""

    def __init__(self, path: Path) -> None:
        """Record the path that would have been overwritten.

        Args:
            path: Configuration path as given by the user.
        """

        super().__init__(f"A file already exists at the given path: {path}")
        self.path = path


@dataclass(frozen=True, slots=True)
class SupportFile:
    """Extra file a component needs next to the configuration."""

    path: Path
    content: str
    executable: bool = False


@dataclass(frozen=True, slots=True)
class ComponentTemplate:
    """Excludes, commands, support files and tool links for one component."""

    excludes: tuple[str, ...] = ()
    commands: tuple[tuple[str, str], ...] = ()
    support_files: tuple[SupportFile, ...] = ()
    tool_urls: tuple[str, ...] = ()


_GO_COMMANDS = (
    (
        "golangci-lint",
        """
type = "both"
include = "**/*.go"
# Large projects with many packages may prefer `invoke.per-dir-or-once = 7`.
invoke = "once"
path-args = "dir"
cmd = ["golangci-lint", "run", "-c", "--allow-parallel-runners"]
tidy-flags = "--fix"
env = { "FAIL_ON_WARNINGS" = "1" }
ok-exit-codes = [0]
lint-failure-exit-codes = [1]
""",
    ),
    (
        "tidy go files",
        """
type = "tidy"
include = "**/*.go"
cmd = ["gofumpt", "-w"]
ok-exit-codes = [0]
""",
    ),
    (
        "check-go-mod",
        f"""
type = "lint"
include = "**/*.go"
invoke = "once"
path-args = "none"
cmd = ["{ROOT_PLACEHOLDER}/dev/bin/check-go-mod.sh"]
ok-exit-codes = [0]
lint-failure-exit-codes = [1]
""",
    ),
)

_GOLANGCI_YML = """
linters:
  disable-all: true
  enable:
    - bodyclose
    - errcheck
    - errorlint
    - exhaustive
    - gocritic
    - gofumpt
    - gosimple
    - govet
    - ineffassign
    - misspell
    - revive
    - staticcheck
    - unconvert
    - unused
  fast: false

linters-settings:
  errcheck:
    check-type-assertions: true
  govet:
    check-shadowing: true
"""

_CHECK_GO_MOD = """
#!/bin/bash

set -e

ROOT=$(git rev-parse --show-toplevel)

if [ ! -f "$ROOT/go.sum" ]; then
    exit 0
fi

BEFORE_MOD=$(md5sum "$ROOT/go.mod")
BEFORE_SUM=$(md5sum "$ROOT/go.sum")

OUTPUT=$(go mod tidy -v 2>&1)

AFTER_MOD=$(md5sum "$ROOT/go.mod")
AFTER_SUM=$(md5sum "$ROOT/go.sum")

if [ "$BEFORE_MOD" != "$AFTER_MOD" ] || [ "$BEFORE_SUM" != "$AFTER_SUM" ]; then
    echo "Running go mod tidy changed go.mod or go.sum"
    git diff "$ROOT/go.mod" "$ROOT/go.sum"
    if [ -n "$OUTPUT" ]; then
        printf "\\nOutput from running go mod tidy -v:\\n%s\\n" "$OUTPUT"
    fi
    exit 1
fi

exit 0
"""

_PERL_INCLUDE = 'include = ["**/*.pl", "**/*.pm", "**/*.t", "**/*.psgi"]'
_POD_INCLUDE = 'include = ["**/*.pl", "**/*.pm", "**/*.pod"]'

_PERL_COMMANDS = (
    (
        "perlimports",
        f"""
type = "both"
{_PERL_INCLUDE}
cmd = ["perlimports"]
lint-flags = ["--lint"]
tidy-flags = ["-i"]
ok-exit-codes = 0
expect-stderr = true
""",
    ),
    (
        "perlcritic",
        f"""
type = "lint"
{_PERL_INCLUDE}
cmd = ["perlcritic", "--profile={ROOT_PLACEHOLDER}/perlcriticrc"]
ok-exit-codes = 0
lint-failure-exit-codes = 2
""",
    ),
    (
        "perltidy",
        f"""
type = "both"
{_PERL_INCLUDE}
cmd = ["perltidy", "--profile={ROOT_PLACEHOLDER}/perltidyrc"]
lint-flags = ["--assert-tidy", "--no-standard-output", "--outfile=/dev/null"]
tidy-flags = ["--backup-and-modify-in-place", "--backup-file-extension=/"]
ok-exit-codes = 0
lint-failure-exit-codes = 2
ignore-stderr = "Begin Error Output Stream"
""",
    ),
    (
        "podchecker",
        f"""
type = "lint"
{_POD_INCLUDE}
cmd = ["podchecker", "--warnings", "--warnings"]
ok-exit-codes = [0, 2]
lint-failure-exit-codes = 1
ignore-stderr = [".+ pod syntax OK", ".+ does not contain any pod commands"]
""",
    ),
    (
        "podtidy",
        f"""
type = "tidy"
{_POD_INCLUDE}
cmd = ["podtidy", "--columns", "100", "--inplace", "--nobackup"]
ok-exit-codes = 0
""",
    ),
)

_RUST_COMMANDS = (
    (
        "rustfmt",
        """
type = "both"
include = "**/*.rs"
cmd = ["rustfmt", "--edition", "2021"]
lint-flags = "--check"
ok-exit-codes = 0
lint-failure-exit-codes = 1
""",
    ),
    (
        "clippy",
        """
type = "lint"
include = "**/*.rs"
invoke = "once"
path-args = "none"
cmd = [
    "cargo",
    "clippy",
    "--locked",
    "--all-targets",
    "--all-features",
    "--workspace",
    "--",
    "-D",
    "clippy::all",
]
ok-exit-codes = 0
lint-failure-exit-codes = 101
ignore-stderr = ["Checking ", "Finished.+", "could not compile"]
""",
    ),
)

_SHELL_COMMANDS = (
    (
        "shellcheck",
        """
type = "lint"
include = "**/*.sh"
cmd = "shellcheck"
ok-exit-codes = 0
lint-failure-exit-codes = 1
""",
    ),
    (
        "shfmt",
        """
type = "both"
include = "**/*.sh"
cmd = ["shfmt", "--simplify", "--indent", "4"]
lint-flags = "--diff"
tidy-flags = "--write"
ok-exit-codes = 0
lint-failure-exit-codes = 1
""",
    ),
)

_GITIGNORE_COMMANDS = (
    (
        "omegasort-gitignore",
        """
type = "both"
include = "**/.gitignore"
cmd = ["omegasort", "--sort", "path", "--unique"]
lint-flags = "--check"
tidy-flags = "--in-place"
ok-exit-codes = 0
lint-failure-exit-codes = 1
ignore-stderr = ["The .+ file is not sorted", "The .+ file is not unique"]
""",
    ),
)

_MARKDOWN_COMMANDS = (
    (
        "prettier-markdown",
        """
type = "both"
include = "**/*.md"
cmd = [
    "./node_modules/.bin/prettier",
    "--no-config",
    "--print-width",
    "100",
    "--prose-wrap",
    "always",
]
lint-flags = "--check"
tidy-flags = "--write"
ok-exit-codes = 0
lint-failure-exit-codes = 1
ignore-stderr = ["Code style issues"]
""",
    ),
)

_TOML_COMMANDS = (
    (
        "taplo",
        """
type = "both"
include = "**/*.toml"
cmd = ["taplo", "format", "--option", "indent_string=    ", "--option", "column_width=100"]
lint-flags = "--check"
ok-exit-codes = 0
lint-failure-exit-codes = 1
ignore-stderr = "INFO taplo.+"
""",
    ),
)

_YAML_COMMANDS = (
    (
        "prettier-yaml",
        """
type = "both"
include = ["**/*.yml", "**/*.yaml"]
cmd = ["./node_modules/.bin/prettier", "--no-config"]
lint-flags = "--check"
tidy-flags = "--write"
ok-exit-codes = 0
lint-failure-exit-codes = 1
ignore-stderr = ["Code style issues"]
""",
    ),
)

TEMPLATES: dict[InitComponent, ComponentTemplate] = {
    InitComponent.GO: ComponentTemplate(
        excludes=("vendor/**/*",),
        commands=_GO_COMMANDS,
        support_files=(
            SupportFile(Path("dev/bin/check-go-mod.sh"), _CHECK_GO_MOD, executable=True),
            SupportFile(Path(".golangci.yml"), _GOLANGCI_YML),
        ),
        tool_urls=("https://golangci-lint.run/", "https://github.com/mvdan/gofumpt"),
    ),
    InitComponent.PERL: ComponentTemplate(
        excludes=(".build/**", "blib/**"),
        commands=_PERL_COMMANDS,
        tool_urls=(
            "https://metacpan.org/dist/Perl-Critic",
            "https://metacpan.org/dist/Perl-Tidy",
            "https://metacpan.org/dist/App-perlimports",
            "https://metacpan.org/dist/Pod-Checker",
            "https://metacpan.org/dist/Pod-Tidy",
        ),
    ),
    InitComponent.RUST: ComponentTemplate(
        excludes=("target",),
        commands=_RUST_COMMANDS,
        tool_urls=("https://doc.rust-lang.org/clippy/",),
    ),
    InitComponent.SHELL: ComponentTemplate(
        commands=_SHELL_COMMANDS,
        tool_urls=("https://www.shellcheck.net/", "https://github.com/mvdan/sh"),
    ),
    InitComponent.GITIGNORE: ComponentTemplate(
        commands=_GITIGNORE_COMMANDS,
        tool_urls=("https://github.com/houseabsolute/omegasort",),
    ),
    InitComponent.MARKDOWN: ComponentTemplate(commands=_MARKDOWN_COMMANDS, tool_urls=("https://prettier.io/",)),
    InitComponent.TOML: ComponentTemplate(commands=_TOML_COMMANDS, tool_urls=("https://taplo.tamasfe.dev/",)),
    InitComponent.YAML: ComponentTemplate(commands=_YAML_COMMANDS, tool_urls=("https://prettier.io/",)),
}

_SUFFIX_COMPONENTS: dict[str, InitComponent] = {
    ".go": InitComponent.GO,
    ".md": InitComponent.MARKDOWN,
    ".pl": InitComponent.PERL,
    ".pm": InitComponent.PERL,
    ".rs": InitComponent.RUST,
    ".sh": InitComponent.SHELL,
    ".toml": InitComponent.TOML,
    ".yml": InitComponent.YAML,
    ".yaml": InitComponent.YAML,
}


@dataclass(slots=True)
class InitResult:
    """What :func:`write_config_files` wrote."""

    config_path: Path
    components: list[InitComponent]
    written: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    tool_urls: list[str] = field(default_factory=list)


def detect_components(root: Path) -> list[InitComponent]:
    """Return the components whose files appear below ``root``.

    The walk honours the same ignore files as a ``--all`` run.

    Args:
        root: Directory to scan.

    Returns:
        list[InitComponent]: Detected components in declaration order.
    """

    found: set[InitComponent] = set()
    resolved = root.resolve()
    for path in IgnoreWalker(resolved).walk():
        if path.name == ".gitignore":
            component: InitComponent | None = InitComponent.GITIGNORE
        else:
            component = _SUFFIX_COMPONENTS.get(path.suffix)
        if component is not None and component not in found:
            LOGGER.debug("File %s matches component %s", path, component.value)
            found.add(component)
    return [component for component in InitComponent if component in found]


def _toml_key(name: str) -> str:
    return f'"{name}"' if " " in name else name


def render_config(components: Iterable[InitComponent]) -> str:
    """Return the configuration text combining ``components``.

    Commands keep their first-seen order; a command shared by two components
    is written once.

    Args:
        components: Components to include.

    Returns:
        str: TOML text ending with a newline.
    """

    excludes: set[str] = set()
    commands: dict[str, str] = {}
    for component in components:
        template = TEMPLATES[component]
        excludes.update(template.excludes)
        for name, body in template.commands:
            commands.setdefault(name, body)

    sections: list[str] = []
    if len(excludes) == 1:
        sections.append(f'exclude = ["{next(iter(excludes))}"]\n')
    elif excludes:
        listed = "\n".join(f'    "{exclude}",' for exclude in sorted(excludes))
        sections.append(f"exclude = [\n{listed}\n]\n")
    for name, body in commands.items():
        sections.append(f"[commands.{_toml_key(name)}]\n{body.strip()}\n")
    return "\n".join(sections)


def write_config_files(path: Path, components: Sequence[InitComponent], *, cwd: Path) -> InitResult:
    """Write a starter configuration and the support files it refers to.

    Support files that already exist are left alone.

    Args:
        path: Configuration file to create, relative to ``cwd``.
        components: Components to include.
        cwd: Directory relative paths are resolved against.

    Returns:
        InitResult: Written and skipped files plus the tools to install.

    Raises:
        FileExists: If ``path`` already exists.
    """

    target = cwd / path
    if target.exists():
        raise FileExists(path)

    chosen = list(dict.fromkeys(components))
    result = InitResult(config_path=path, components=chosen)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_config(chosen), encoding="utf-8")
    LOGGER.debug("Wrote %s for %s", target, ", ".join(component.value for component in chosen))

    support: dict[Path, SupportFile] = {}
    for component in chosen:
        template = TEMPLATES[component]
        for extra in template.support_files:
            support.setdefault(extra.path, extra)
        for url in template.tool_urls:
            if url not in result.tool_urls:
                result.tool_urls.append(url)

    for relative in sorted(support):
        extra = support[relative]
        destination = cwd / relative
        if destination.exists():
            result.skipped.append(relative)
            continue
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(extra.content.lstrip(), encoding="utf-8")
        if extra.executable:
            destination.chmod(destination.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        result.written.append(relative)
    return result


__all__ = [
    "ComponentTemplate",
    "FileExists",
    "InitComponent",
    "InitResult",
    "SupportFile",
    "TEMPLATES",
    "detect_components",
    "render_config",
    "write_config_files",
]
