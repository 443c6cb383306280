# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared utilities for CLI commands (logging, errors, session setup)."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import typer

from ..config import ScannerConfig, load_config
from ..errors import ConfigurationError, ScannerError
from ..events import EventChannel, LogEventDisplayer, LogEventLogger
from ..logging import fail as core_fail
from ..logging import ok as core_ok
from ..logging import warn as core_warn
from ..writers import LogFileWriter

INTERNAL_ERROR_PREFIX = "internal error (please report this): "


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI colour and emoji settings."""

    use_emoji: bool
    use_color: bool | None = None

    def fail(self, message: str) -> None:
        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color)


def build_cli_logger(*, no_emoji: bool = False, no_color: bool = False) -> CLILogger:
    """Return a :class:`CLILogger` for the provided presentation flags."""

    return CLILogger(use_emoji=not no_emoji, use_color=False if no_color else None)


@contextmanager
def handle_scanner_errors(logger: CLILogger) -> Iterator[None]:
    """Translate :class:`ScannerError` into a failure line and ``typer.Exit``.

    Errors flagged as internal are prefixed so the user is not blamed for them.

    Raises:
        typer.Exit: With the error's exit code.
    """

    try:
        yield
    except ScannerError as exc:
        message = f"{INTERNAL_ERROR_PREFIX}{exc}" if exc.internal else str(exc)
        logger.fail(message)
        raise typer.Exit(code=exc.exit_code) from exc


@dataclass(slots=True)
class CLISession:
    """Configuration and event channel shared by one command invocation."""

    config: ScannerConfig
    events: EventChannel
    logger: CLILogger


@contextmanager
def cli_session(
    *,
    config_file: Path | None,
    verbose: bool = False,
    no_emoji: bool = False,
    no_color: bool = False,
) -> Iterator[CLISession]:
    """Load configuration and attach console and log-file listeners for a command.

    Args:
        config_file: Explicit configuration file, if any.
        verbose: Show informational events on the console.
        no_emoji: Suppress emoji prefixes.
        no_color: Disable colour output.

    Yields:
        CLISession: Ready session; listeners are detached on exit.

    Raises:
        typer.Exit: If the configuration cannot be loaded.
    """

    logger = build_cli_logger(no_emoji=no_emoji, no_color=no_color)
    with handle_scanner_errors(logger):
        config = load_config(config_file)
    events = EventChannel()
    displayer = LogEventDisplayer(use_emoji=logger.use_emoji, use_color=logger.use_color, verbose=verbose)
    log_file = LogEventLogger(LogFileWriter.from_config(config))
    with events.listening(displayer, log_file), handle_scanner_errors(logger):
        yield CLISession(config=config, events=events, logger=logger)


def bad_parameter(exc: ConfigurationError) -> typer.BadParameter:
    """Return a ``typer.BadParameter`` carrying ``exc``'s message."""

    return typer.BadParameter(str(exc))


__all__ = [
    "CLILogger",
    "CLISession",
    "INTERNAL_ERROR_PREFIX",
    "bad_parameter",
    "build_cli_logger",
    "cli_session",
    "handle_scanner_errors",
]
