# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate, parse and validate the project configuration."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from ..constants import CONFIG_FILE_NAMES, DEFAULT_LABEL, VCS_DIRS
from ..errors import ConfigError
from ..filters.filter import Filter
from ..filters.model import Action, FilterKind
from .models import ProjectConfig

LOGGER = logging.getLogger(__name__)


class CannotFindRoot(ConfigError):
    """Raised when neither a config file nor a checkout root can be found."""

    def __init__(self, cwd: Path) -> None:
        """Record the directory the search started from."""

        super().__init__(f"Could not find a config file or VCS checkout root starting from {cwd}")
        self.cwd = cwd


class ConfigFileError(ConfigError):
    """Raised when the config file cannot be read, parsed or validated."""

    def __init__(self, path: Path, reason: str) -> None:
        """Record the file and the parse or validation failure.

        Args:
            path: Config file being loaded.
            reason: Description of what went wrong.
        """

        super().__init__(f"Failed to load config from {path}: {reason}")
        self.path = path
        self.reason = reason


def default_config_file(directory: Path) -> Path:
    """Return the first existing config file in ``directory``, or the preferred name."""

    candidates = [directory / name for name in CONFIG_FILE_NAMES]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[0]


def is_checkout_root(directory: Path) -> bool:
    return any((directory / name).exists() for name in VCS_DIRS)


def find_project_root(config_file: Path | None, cwd: Path) -> Path:
    """Determine the project root.

    Args:
        config_file: Config file passed explicitly, if any.
        cwd: Current working directory.

    Returns:
        Path: Absolute project root.

    Raises:
        CannotFindRoot: If no config file is present and no ancestor is a
            VCS checkout root.
    """

    if config_file is not None:
        parent = config_file.parent
        return (cwd / parent).resolve() if str(parent) not in {"", "."} else cwd.resolve()
    if default_config_file(cwd).exists():
        return cwd.resolve()
    for ancestor in (cwd, *cwd.parents):
        if is_checkout_root(ancestor):
            return ancestor.resolve()
    raise CannotFindRoot(cwd)


def load_config(path: Path) -> ProjectConfig:
    """Parse and validate the TOML file at ``path``.

    Raises:
        ConfigFileError: If the file is unreadable, is not TOML, or fails validation.
    """

    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ConfigFileError(path, str(exc)) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileError(path, f"invalid TOML: {exc}") from exc
    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigFileError(path, str(exc)) from exc


@dataclass(frozen=True, slots=True)
class LoadedConfig:
    """A validated configuration together with where it came from."""

    project_root: Path
    config_file: Path
    config: ProjectConfig

    @classmethod
    def discover(cls, cwd: Path, config_file: Path | None = None) -> LoadedConfig:
        """Find the project root and load its configuration.

        Args:
            cwd: Current working directory.
            config_file: Explicit config file path, relative to ``cwd`` or absolute.

        Returns:
            LoadedConfig: Root, file and parsed configuration.
        """

        project_root = find_project_root(config_file, cwd)
        if config_file is not None:
            path = cwd / config_file
            LOGGER.debug("Loading config from %s (set via flag)", path)
        else:
            path = default_config_file(project_root)
            LOGGER.debug("Loading config from %s (default location)", path)
        return cls(project_root=project_root, config_file=path, config=load_config(path))

    def filters(self, action: Action, *, command: str | None = None, label: str | None = None) -> list[Filter]:
        """Build the filters that take part in ``action``, in declaration order.

        Args:
            action: Lint or tidy.
            command: Restrict to the command with this name.
            label: Restrict to commands carrying this label; defaults to
                the ``default`` label.

        Returns:
            list[Filter]: Matching filters; possibly empty.
        """

        wanted_kind = FilterKind.LINT if action is Action.LINT else FilterKind.TIDY
        filters: list[Filter] = []
        for name, entry in self.config.commands.items():
            if command is not None and name != command:
                continue
            if not entry.matches_label(label or DEFAULT_LABEL):
                continue
            if entry.kind not in {wanted_kind, FilterKind.BOTH}:
                continue
            filters.append(Filter(entry.to_params(name), self.project_root))
        return filters


__all__ = [
    "CannotFindRoot",
    "ConfigFileError",
    "LoadedConfig",
    "default_config_file",
    "find_project_root",
    "load_config",
]
