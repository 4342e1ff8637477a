# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run orchestration."""

from __future__ import annotations

from .orchestrator import Exit, ExitStatus, Orchestrator

__all__ = ["Exit", "ExitStatus", "Orchestrator"]
