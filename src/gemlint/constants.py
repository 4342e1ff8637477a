# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Project-wide constants."""

from __future__ import annotations

from typing import Final

VCS_DIRS: Final[tuple[str, ...]] = (".git", ".hg", ".svn")
CONFIG_FILE_NAMES: Final[tuple[str, ...]] = ("gemlint.toml", ".gemlint.toml")
ROOT_PLACEHOLDER: Final[str] = "$GEMLINT_ROOT"
DEFAULT_LABEL: Final[str] = "default"

__all__ = ["CONFIG_FILE_NAMES", "DEFAULT_LABEL", "ROOT_PLACEHOLDER", "VCS_DIRS"]
