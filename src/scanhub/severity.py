# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import IntEnum
from typing import Final

from .errors import ConfigurationError


class SeverityLevel(IntEnum):
    """Ordinal severity shared by every engine; lower values are more severe."""

    CRITICAL = 1
    HIGH = 2
    MODERATE = 3
    LOW = 4
    INFO = 5

    @property
    def label(self) -> str:
        """Return the title-cased level name used in human-readable output."""

        return self.name.title()


NO_SEVERITY: Final[int] = 0

_SEVERITY_TO_SARIF_LEVEL: Final[dict[SeverityLevel, str]] = {
    SeverityLevel.CRITICAL: "error",
    SeverityLevel.HIGH: "error",
    SeverityLevel.MODERATE: "warning",
    SeverityLevel.LOW: "note",
    SeverityLevel.INFO: "note",
}


def parse_severity(value: str | int) -> SeverityLevel:
    """Parse ``value`` as a severity number (``1``-``5``) or level name.

    Args:
        value: Raw severity supplied by a user, config file or selector term.

    Returns:
        SeverityLevel: Matching severity level.

    Raises:
        ConfigurationError: If ``value`` names no known severity.
    """

    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return SeverityLevel(value)
        except ValueError as exc:
            raise ConfigurationError(f"invalid severity '{value}'; expected 1-5") from exc
    candidate = str(value).strip()
    if candidate.isdigit():
        return parse_severity(int(candidate))
    try:
        return SeverityLevel[candidate.upper()]
    except KeyError as exc:
        choices = ", ".join(level.name.lower() for level in SeverityLevel)
        raise ConfigurationError(f"invalid severity '{value}'; expected 1-5 or one of: {choices}") from exc


def try_parse_severity(value: str) -> SeverityLevel | None:
    """Return the severity named by ``value`` or ``None`` when it names none."""

    try:
        return parse_severity(value)
    except ConfigurationError:
        return None


def severity_to_sarif(severity: int) -> str:
    """Map a severity ordinal to a SARIF reporting level."""

    try:
        return _SEVERITY_TO_SARIF_LEVEL[SeverityLevel(severity)]
    except ValueError:
        return "warning"


def severity_display(severity: int) -> str:
    """Return ``"<n> (<Label>)"`` for ``severity``, as shown in tables."""

    try:
        return f"{severity} ({SeverityLevel(severity).label})"
    except ValueError:
        return str(severity)


__all__ = [
    "NO_SEVERITY",
    "SeverityLevel",
    "parse_severity",
    "severity_display",
    "severity_to_sarif",
    "try_parse_severity",
]
