# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Merge dispatched violations into a single formatted result."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .errors import RecombinationError
from .formats import OutputFormat
from .formatters import get_formatter
from .models import EngineSummary, RecombinedRuleResults, TableResults, Violation
from .severity import NO_SEVERITY


def build_summary_map(violations: Sequence[Violation], engines: Iterable[str] = ()) -> dict[str, EngineSummary]:
    """Return per-engine violation and distinct file counts.

    Engines listed in ``engines`` appear first, even with zero violations;
    engines seen only in ``violations`` follow in first-seen order.
    """

    counts: dict[str, int] = {name: 0 for name in engines}
    files: dict[str, set[str]] = {name: set() for name in counts}
    for violation in violations:
        counts[violation.engine] = counts.get(violation.engine, 0) + 1
        files.setdefault(violation.engine, set()).add(violation.file)
    return {
        name: EngineSummary(violation_count=count, file_count=len(files[name]))
        for name, count in counts.items()
    }


def minimum_severity(violations: Iterable[Violation]) -> int:
    """Return the most severe (lowest) severity, or ``0`` when there is none."""

    return min((violation.severity for violation in violations), default=NO_SEVERITY)


def sort_violations(violations: Iterable[Violation]) -> list[Violation]:
    """Return ``violations`` ordered by severity, file, line and column."""

    return sorted(
        violations,
        key=lambda item: (item.severity, item.file, item.line or 0, item.column or 0, item.engine, item.rule),
    )


class ResultRecombinator:
    """Compute summary data and render violations in the requested format."""

    def recombine(
        self,
        violations: Sequence[Violation],
        fmt: OutputFormat,
        *,
        engines: Iterable[str] = (),
    ) -> RecombinedRuleResults:
        """Produce the terminal result of a run.

        Violations are rendered in the order given.

        Args:
            violations: Violations from the dispatcher.
            fmt: Requested output format.
            engines: Engines that ran, so empty engines still get a summary entry.

        Returns:
            RecombinedRuleResults: Formatted results with summary data.

        Raises:
            RecombinationError: If the formatter output does not fit ``fmt``.
        """

        summary = build_summary_map(violations, engines)
        rendered = get_formatter(fmt)(violations, summary)
        if fmt is OutputFormat.TABLE and not isinstance(rendered, TableResults):
            raise RecombinationError(f"formatter for '{fmt.value}' returned {type(rendered).__name__}, not rows")
        if fmt is not OutputFormat.TABLE and not isinstance(rendered, str):
            raise RecombinationError(f"formatter for '{fmt.value}' returned {type(rendered).__name__}, not text")
        return RecombinedRuleResults(
            min_sev=minimum_severity(violations),
            summary_map=summary,
            results=rendered,
            format=fmt,
            violations=tuple(violations),
        )


__all__ = ["ResultRecombinator", "build_summary_map", "minimum_severity", "sort_violations"]
