# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""SARIF 2.1.0 results with one run per engine."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Final

from .. import __version__
from ..models import Violation
from ..severity import severity_to_sarif
from .base import SummaryMap

SARIF_VERSION: Final[str] = "2.1.0"
SARIF_SCHEMA: Final[str] = "https://schemastore.azurewebsites.net/schemas/json/sarif-2.1.0.json"


def format_sarif(violations: Sequence[Violation], summary: SummaryMap) -> str:
    """Render a SARIF log; engines that ran without findings still get a run."""

    grouped: dict[str, list[Violation]] = {engine: [] for engine in summary}
    for violation in violations:
        grouped.setdefault(violation.engine, []).append(violation)
    document = {
        "version": SARIF_VERSION,
        "$schema": SARIF_SCHEMA,
        "runs": [_build_sarif_run(engine, entries) for engine, entries in grouped.items()],
    }
    return json.dumps(document, indent=2) + "\n"


def _build_sarif_run(engine: str, violations: Sequence[Violation]) -> dict[str, object]:
    """Construct the SARIF run payload for a single engine.

    Args:
        engine: Name of the engine that emitted ``violations``.
        violations: Violations attributed to ``engine``.

    Returns:
        dict[str, object]: SARIF-compliant run dictionary.
    """

    rules: dict[str, dict[str, object]] = {}
    results: list[dict[str, object]] = []
    for violation in violations:
        if violation.rule not in rules:
            rule_entry: dict[str, object] = {
                "id": violation.rule,
                "name": violation.rule,
                "properties": {"severity": violation.severity},
            }
            if violation.category:
                rule_entry["properties"] = {"severity": violation.severity, "category": violation.category}
            if violation.resource_url:
                rule_entry["helpUri"] = violation.resource_url
            rules[violation.rule] = rule_entry
        region: dict[str, int] = {}
        if violation.line is not None:
            region["startLine"] = violation.line
        if violation.column is not None:
            region["startColumn"] = violation.column
        if violation.end_line is not None:
            region["endLine"] = violation.end_line
        if violation.end_column is not None:
            region["endColumn"] = violation.end_column
        physical_location: dict[str, object] = {"artifactLocation": {"uri": violation.file}}
        if region:
            physical_location["region"] = region
        results.append(
            {
                "ruleId": violation.rule,
                "ruleIndex": list(rules).index(violation.rule),
                "level": severity_to_sarif(violation.severity),
                "message": {"text": violation.message},
                "locations": [{"physicalLocation": physical_location}],
            }
        )
    return {
        "tool": {
            "driver": {
                "name": engine,
                "informationUri": "https://pypi.org/project/scanhub/",
                "semanticVersion": __version__,
                "rules": list(rules.values()),
            }
        },
        "results": results,
    }


__all__ = ["SARIF_SCHEMA", "SARIF_VERSION", "format_sarif"]
