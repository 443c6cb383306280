# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich-backed console viewers for rules, results and configuration."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Protocol

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .console import console_for, detect_tty
from .formatters.table import format_table
from .logging import section
from .models import RecombinedRuleResults, Rule, TableResults
from .severity import severity_display


class ViewMode(str, Enum):
    """Console presentation chosen with ``--view``."""

    TABLE = "table"
    DETAIL = "detail"


RULE_TABLE_COLUMNS: tuple[str, ...] = ("#", "Name", "Engine", "Severity", "Tag")

_SEVERITY_STYLES: dict[int, str] = {1: "bold red", 2: "red", 3: "yellow", 4: "cyan", 5: "dim"}


def _console(use_color: bool | None) -> tuple[Console, bool]:
    color = detect_tty() if use_color is None else use_color
    return console_for(color=color, emoji=False), color


class RuleViewer(Protocol):
    def view(self, rules: Sequence[Rule]) -> None: ...


class ResultsViewer(Protocol):
    def view(self, results: RecombinedRuleResults) -> None: ...


class RuleTableViewer:
    """Render rules as a compact table."""

    def __init__(self, *, use_color: bool | None = None) -> None:
        self._use_color = use_color

    def view(self, rules: Sequence[Rule]) -> None:
        console, color = _console(self._use_color)
        if not rules:
            console.print("No rules match the selection.")
            return
        table = Table(box=box.SIMPLE_HEAVY if color else box.SIMPLE, pad_edge=False)
        for column in RULE_TABLE_COLUMNS:
            table.add_column(column, no_wrap=column != "Tag")
        for index, rule in enumerate(rules, start=1):
            table.add_row(str(index), rule.name, rule.engine, severity_display(rule.severity), ", ".join(rule.tags))
        console.print(table)
        console.print(f"{len(rules)} rule(s) found.")


class RuleDetailViewer:
    """Render each rule as a block of labelled fields."""

    def __init__(self, *, use_color: bool | None = None) -> None:
        self._use_color = use_color

    def view(self, rules: Sequence[Rule]) -> None:
        console, color = _console(self._use_color)
        for index, rule in enumerate(rules, start=1):
            section(f"{index}. {rule.name}", use_color=color)
            fields = (
                ("Engine", rule.engine),
                ("Severity", severity_display(rule.severity)),
                ("Tags", ", ".join(rule.tags)),
                ("Categories", ", ".join(rule.categories)),
                ("Rulesets", ", ".join(rule.rulesets)),
                ("Languages", ", ".join(rule.languages)),
                ("Description", rule.description),
                ("Resources", ", ".join(rule.resource_urls)),
            )
            for label, value in fields:
                if value:
                    console.print(f"    {label}: {value}")
        console.print(f"{len(rules)} rule(s) found.")


class NoOpViewer:
    """Viewer used when output goes only to files."""

    def view(self, _payload: object) -> None:
        return None


class ResultsTableViewer:
    """Render recombined results as a rich table."""

    def __init__(self, *, use_color: bool | None = None) -> None:
        self._use_color = use_color

    def view(self, results: RecombinedRuleResults) -> None:
        console, color = _console(self._use_color)
        rows = results.results
        if not isinstance(rows, TableResults):
            rows = format_table(results.violations, results.summary_map)
        if not rows.rows:
            return
        table = Table(box=box.SIMPLE_HEAVY if color else box.SIMPLE, pad_edge=False)
        for column in rows.columns:
            table.add_column(column, no_wrap=column in {"#", "Severity", "Line"})
        for violation, row in zip(results.violations, rows.rows, strict=True):
            style = _SEVERITY_STYLES.get(violation.severity) if color else None
            cells: list[str | Text] = []
            for column in rows.columns:
                value = str(row.get(column, ""))
                cells.append(Text(value, style=style) if style and column == "Severity" else value)
            table.add_row(*cells)
        console.print(table)


class ResultsDetailViewer:
    """Render each violation as a labelled block."""

    def __init__(self, *, use_color: bool | None = None) -> None:
        self._use_color = use_color

    def view(self, results: RecombinedRuleResults) -> None:
        console, color = _console(self._use_color)
        for index, violation in enumerate(results.violations, start=1):
            section(f"{index}. {violation.rule}", use_color=color)
            location = violation.file if violation.line is None else f"{violation.file}:{violation.line}"
            console.print(f"    Engine: {violation.engine}")
            console.print(f"    Severity: {severity_display(violation.severity)}")
            console.print(f"    File: {location}")
            console.print(f"    Message: {violation.message}")
            if violation.resource_url:
                console.print(f"    Resource: {violation.resource_url}")


class ConfigViewer:
    """Print an effective configuration YAML document."""

    def __init__(self, *, use_color: bool | None = None) -> None:
        self._use_color = use_color

    def view(self, document: str) -> None:
        console, _ = _console(self._use_color)
        console.print(Text(document.rstrip("\n")))


def rule_viewer_for(view: ViewMode | None, *, use_color: bool | None = None) -> RuleViewer:
    match view:
        case ViewMode.TABLE:
            return RuleTableViewer(use_color=use_color)
        case ViewMode.DETAIL:
            return RuleDetailViewer(use_color=use_color)
    return NoOpViewer()


def results_viewer_for(view: ViewMode | None, *, use_color: bool | None = None) -> ResultsViewer:
    match view:
        case ViewMode.TABLE:
            return ResultsTableViewer(use_color=use_color)
        case ViewMode.DETAIL:
            return ResultsDetailViewer(use_color=use_color)
    return NoOpViewer()


__all__ = [
    "ConfigViewer",
    "NoOpViewer",
    "RULE_TABLE_COLUMNS",
    "ResultsDetailViewer",
    "ResultsTableViewer",
    "ResultsViewer",
    "RuleDetailViewer",
    "RuleTableViewer",
    "RuleViewer",
    "ViewMode",
    "results_viewer_for",
    "rule_viewer_for",
]
