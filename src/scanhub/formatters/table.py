# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Structured rows consumed by the interactive table viewer."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from ..models import TableResults, Violation
from ..severity import severity_display
from .base import SummaryMap, optional_text

TABLE_COLUMNS: Final[tuple[str, ...]] = ("#", "Severity", "File", "Line", "Rule", "Engine", "Message")


def format_table(violations: Sequence[Violation], summary: SummaryMap) -> TableResults:
    _ = summary
    rows = tuple(
        {
            "#": str(index),
            "Severity": severity_display(violation.severity),
            "File": violation.file,
            "Line": optional_text(violation.line),
            "Rule": violation.rule,
            "Engine": violation.engine,
            "Message": violation.message,
        }
        for index, violation in enumerate(violations, start=1)
    )
    return TableResults(columns=TABLE_COLUMNS, rows=rows)


__all__ = ["TABLE_COLUMNS", "format_table"]
