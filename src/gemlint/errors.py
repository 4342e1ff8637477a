# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Base exception types shared across gemlint subsystems."""

from __future__ import annotations


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class SelectionError(Exception):
    """Raised when the files for a run cannot be selected."""


class FilterError(RuntimeError):
    """Raised when a filter cannot act on the paths it was handed."""


__all__ = ["ConfigError", "FilterError", "SelectionError"]
