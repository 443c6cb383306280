# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy surfaced by the scanhub pipeline."""

from __future__ import annotations

from pydantic import ValidationError

INTERNAL_ERROR_CODE = 1


class ScannerError(RuntimeError):
    """Base error carrying the exit status the CLI should report."""

    internal = False

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


class ConfigurationError(ScannerError):
    """Raised for invalid user input detected before any engine runs."""


class TargetResolutionError(ScannerError):
    """Raised when a directly named target path does not exist."""

    def __init__(self, target: str) -> None:
        super().__init__(f"target '{target}' does not exist")
        self.target = target


class EngineExecutionError(ScannerError):
    """Raised when an engine's run fails, aborting the whole dispatch."""

    def __init__(self, engine: str, message: str) -> None:
        """Record the failing engine alongside the failure message.

        Args:
            engine: Name of the engine whose run raised.
            message: Description of the underlying failure.
        """

        super().__init__(f"engine '{engine}' failed: {message}")
        self.engine = engine


class RecombinationError(ScannerError):
    """Raised when components disagree on a result shape; never user error."""

    internal = True

    def __init__(self, message: str) -> None:
        super().__init__(message, exit_code=INTERNAL_ERROR_CODE)


def first_validation_error(exc: ValidationError) -> str:
    """Return the first problem in ``exc`` as ``location: message``."""

    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}" if location else str(first.get("msg"))


__all__ = [
    "ConfigurationError",
    "EngineExecutionError",
    "INTERNAL_ERROR_CODE",
    "RecombinationError",
    "ScannerError",
    "TargetResolutionError",
    "first_validation_error",
]
