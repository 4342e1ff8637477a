# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Result reporting helpers."""

from __future__ import annotations

from .console import ActionFailure, Reporter

__all__ = ["ActionFailure", "Reporter"]
