# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the scanhub package."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .formats import OutputFormat


class Rule(BaseModel):
    """Immutable rule metadata contributed by one engine."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    engine: str = Field(min_length=1)
    severity: int = Field(ge=1, le=5)
    tags: tuple[str, ...] = Field(default_factory=tuple)
    categories: tuple[str, ...] = Field(default_factory=tuple)
    rulesets: tuple[str, ...] = Field(default_factory=tuple)
    languages: tuple[str, ...] = Field(default_factory=tuple)
    description: str = ""
    resource_urls: tuple[str, ...] = Field(default_factory=tuple)
    is_pilot: bool = False
    default_enabled: bool = True

    @property
    def key(self) -> tuple[str, str]:
        """Return the ``(name, engine)`` identity of the rule."""
        return self.name, self.engine


class RuleGroup(BaseModel):
    """Named engine-specific bundle of rules (a category or a ruleset)."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    engine: str = Field(min_length=1)
    paths: tuple[str, ...] = Field(default_factory=tuple)


class Catalog(BaseModel):
    """Aggregated rules and rule groups known to the orchestrator."""

    model_config = ConfigDict(frozen=True)

    rules: tuple[Rule, ...] = Field(default_factory=tuple)
    categories: tuple[RuleGroup, ...] = Field(default_factory=tuple)
    rulesets: tuple[RuleGroup, ...] = Field(default_factory=tuple)


class RuleTarget(BaseModel):
    """One user-supplied target resolved to concrete paths for one engine.

    Relative ``target`` and ``paths`` values are anchored at ``root``; the
    process working directory is used when ``root`` is unset.
    """

    model_config = ConfigDict(frozen=True)

    target: str
    paths: tuple[str, ...]
    is_directory: bool = False
    degraded: bool = False
    root: Path | None = None


class Violation(BaseModel):
    """A single rule infraction reported by an engine."""

    model_config = ConfigDict(frozen=True)

    rule: str
    engine: str
    severity: int = Field(ge=1, le=5)
    file: str
    message: str
    line: int | None = None
    column: int | None = None
    end_line: int | None = None
    end_column: int | None = None
    category: str | None = None
    resource_url: str | None = None

    @field_validator("file", mode="before")
    @classmethod
    def _posix_file(cls, value: object) -> object:
        """Store file paths with forward slashes so output is platform-neutral."""
        if isinstance(value, str):
            return value.replace("\\", "/")
        return value


class EngineSummary(BaseModel):
    """Per-engine totals reported alongside recombined results."""

    model_config = ConfigDict(frozen=True)

    violation_count: int = 0
    file_count: int = 0


class TableResults(BaseModel):
    """Column/row structure used for interactive table display."""

    model_config = ConfigDict(frozen=True)

    columns: tuple[str, ...]
    rows: tuple[dict[str, Any], ...] = Field(default_factory=tuple)


class RecombinedRuleResults(BaseModel):
    """Terminal artifact of a run: merged violations in a requested format."""

    model_config = ConfigDict(frozen=True)

    min_sev: int
    summary_map: dict[str, EngineSummary]
    results: str | TableResults
    format: OutputFormat
    violations: tuple[Violation, ...] = Field(default_factory=tuple)

    def has_violations(self) -> bool:
        """Return ``True`` when any engine reported at least one violation."""
        return any(summary.violation_count for summary in self.summary_map.values())


__all__ = [
    "Catalog",
    "EngineSummary",
    "RecombinedRuleResults",
    "Rule",
    "RuleGroup",
    "RuleTarget",
    "TableResults",
    "Violation",
]
