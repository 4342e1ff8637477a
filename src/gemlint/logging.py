# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing console helpers and the process-wide diagnostic logger."""

from __future__ import annotations

import logging
import sys
from functools import cache
from typing import Final, Literal

from rich.console import Console
from rich.logging import RichHandler
from rich.rule import Rule
from rich.text import Text

PACKAGE_LOGGER_NAME: Final[str] = "gemlint"
_CONFIGURED_FLAG: Final[str] = "_gemlint_configured"


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


class ConsoleManager:
    """Provision rich consoles keyed by colour and emoji preferences."""

    def __init__(self) -> None:
        self._cache: dict[tuple[bool, bool, bool], Console] = {}

    def get(self, *, color: bool, emoji: bool) -> Console:
        """Return a console configured for ``color`` and ``emoji``.

        Args:
            color: ``True`` when ANSI colour output should be enabled.
            emoji: ``True`` when rich should render emoji glyphs.

        Returns:
            Console: Cached or newly constructed console.
        """

        tty = detect_tty()
        key = (color, emoji, tty)
        if key not in self._cache:
            color_system: Literal["auto"] | None = "auto" if color and tty else None
            self._cache[key] = Console(
                color_system=color_system,
                force_terminal=tty,
                no_color=not (color and tty),
                emoji=emoji,
                soft_wrap=True,
                highlight=False,
            )
        return self._cache[key]


@cache
def get_console_manager() -> ConsoleManager:
    """Return the process-wide :class:`ConsoleManager`."""

    return ConsoleManager()


def emoji(symbol: str, enable: bool) -> str:
    """Return ``symbol`` when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def print_line(msg: str, *, style: str | None = None, use_emoji: bool = True, use_color: bool | None = None) -> None:
    """Render ``msg`` verbatim, optionally styled.

    Args:
        msg: Message text; rich markup in it is not interpreted.
        style: Rich style applied when colour output is active.
        use_emoji: Whether emoji output is desired.
        use_color: Explicit colour flag overriding TTY detection.
    """

    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, emoji=use_emoji)
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    console.print(text)


def section(title: str, *, use_color: bool) -> None:
    """Render a section header."""

    console = get_console_manager().get(color=use_color, emoji=True)
    if use_color:
        console.print()
        console.print(Rule(title))
    else:
        console.print(Text(f"\n--- {title} ---"))


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational message."""

    print_line(f"{emoji('ℹ️ ', use_emoji)}{msg}", style="cyan", use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error message."""

    print_line(f"{emoji('❌ ', use_emoji)}{msg}", style="red", use_emoji=use_emoji, use_color=use_color)


def init_logging(level: int = logging.WARNING) -> logging.Logger:
    """Attach a stderr handler to the package logger exactly once.

    Later calls only adjust the level; they never add a second handler.

    Args:
        level: Threshold for diagnostic messages.

    Returns:
        logging.Logger: The package logger.
    """

    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(level)
    if getattr(logger, _CONFIGURED_FLAG, False):
        return logger
    # A stderr console resolves sys.stderr at write time, so redirected
    # streams are honoured.
    handler = RichHandler(
        console=Console(stderr=True, soft_wrap=True, highlight=False),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    setattr(logger, _CONFIGURED_FLAG, True)
    return logger


__all__ = [
    "ConsoleManager",
    "PACKAGE_LOGGER_NAME",
    "detect_tty",
    "emoji",
    "fail",
    "get_console_manager",
    "info",
    "init_logging",
    "print_line",
    "section",
]
