# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Git helpers used for file selection and stashing."""

from __future__ import annotations

from .git import GitClient, GitRunner, StashGuard

__all__ = ["GitClient", "GitRunner", "StashGuard"]
