# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared Rich consoles for log and results output."""

from __future__ import annotations

import sys
from functools import lru_cache

from rich.console import Console


def detect_tty() -> bool:
    """Return ``True`` when stdout is attached to a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


def console_for(*, color: bool, emoji: bool) -> Console:
    """Return the shared console for ``color`` and ``emoji``.

    Colour is only emitted when stdout is a terminal, whatever ``color`` says.
    """

    return _console(color, emoji, detect_tty())


@lru_cache(maxsize=None)
def _console(color: bool, emoji: bool, tty: bool) -> Console:
    styled = color and tty
    return Console(
        color_system="auto" if styled else None,
        force_terminal=tty,
        no_color=not styled,
        emoji=emoji,
        soft_wrap=True,
    )


def reset_consoles() -> None:
    """Forget cached consoles so later lookups bind to the current stdout."""

    _console.cache_clear()


__all__ = ["console_for", "detect_tty", "reset_consoles"]
