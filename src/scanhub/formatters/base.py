# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared formatter protocol and helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol

from ..models import EngineSummary, TableResults, Violation

SummaryMap = Mapping[str, EngineSummary]


class ResultsFormatter(Protocol):
    """Callable rendering violations into one output encoding."""

    def __call__(self, violations: Sequence[Violation], summary: SummaryMap) -> str | TableResults: ...


def location_text(violation: Violation) -> str:
    """Return ``file:line:column`` with the missing parts omitted."""

    parts = [violation.file]
    if violation.line is not None:
        parts.append(str(violation.line))
        if violation.column is not None:
            parts.append(str(violation.column))
    return ":".join(parts)


def optional_text(value: object) -> str:
    return "" if value is None else str(value)


__all__ = ["ResultsFormatter", "SummaryMap", "location_text", "optional_text"]
