# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Comma-separated results."""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from typing import Final

from ..models import Violation
from .base import SummaryMap, optional_text

CSV_HEADER: Final[tuple[str, ...]] = (
    "Problem",
    "Severity",
    "File",
    "Line",
    "Column",
    "Rule",
    "Description",
    "URL",
    "Category",
    "Engine",
)


def format_csv(violations: Sequence[Violation], summary: SummaryMap) -> str:
    """Render one row per violation below the fixed header; ``Problem`` is 1-based."""

    _ = summary
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for index, violation in enumerate(violations, start=1):
        writer.writerow(
            [
                index,
                violation.severity,
                violation.file,
                optional_text(violation.line),
                optional_text(violation.column),
                violation.rule,
                violation.message,
                optional_text(violation.resource_url),
                optional_text(violation.category),
                violation.engine,
            ]
        )
    return buffer.getvalue()


__all__ = ["CSV_HEADER", "format_csv"]
