# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configured lint and tidy commands."""

from __future__ import annotations

from .filter import Filter
from .model import Action, FilterKind, FilterParams, Invoke, LintOutcome, RunScope, TidyOutcome

__all__ = [
    "Action",
    "Filter",
    "FilterKind",
    "FilterParams",
    "Invoke",
    "LintOutcome",
    "RunScope",
    "TidyOutcome",
]
