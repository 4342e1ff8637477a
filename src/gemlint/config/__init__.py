# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration loading for gemlint."""

from __future__ import annotations

from .loader import LoadedConfig, find_project_root, load_config
from .models import CommandConfig, ProjectConfig

__all__ = ["CommandConfig", "LoadedConfig", "ProjectConfig", "find_project_root", "load_config"]
