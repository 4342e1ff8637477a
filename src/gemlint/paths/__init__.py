# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File selection, ignore rules and directory grouping."""

from __future__ import annotations

from .groups import Group, make_groups
from .ignore import IgnoreWalker
from .matcher import PathMatcher, PatternSyntaxError, compile_matcher
from .mode import SelectionKind, SelectionMode
from .selector import FileSelector

__all__ = [
    "FileSelector",
    "Group",
    "IgnoreWalker",
    "PathMatcher",
    "PatternSyntaxError",
    "SelectionKind",
    "SelectionMode",
    "compile_matcher",
    "make_groups",
]
