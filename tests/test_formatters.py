# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the results formatters."""

from __future__ import annotations

import csv
import io
import json
import xml.etree.ElementTree as ET

from scanhub.formats import OutputFormat
from scanhub.formatters.csv import CSV_HEADER
from scanhub.models import Violation
from scanhub.recombine import ResultRecombinator
from tests.stubs import make_violation

VIOLATIONS = [
    make_violation("regex", "NoTrailingWhitespace", "src/a.py", 3, severity=4),
    make_violation("regex", "NoHardcodedSecrets", "src/b.py", 10, severity=1),
    make_violation("pyast", "BareExcept", "src/a.py", 7, severity=2),
    Violation(rule="BareExcept", engine="pyast", severity=2, file="src\\c.py", message="<tag> & \"quote\""),
]


def _keys(violations: list[Violation]) -> list[tuple[str, int | None, str]]:
    return [(item.file, item.line, item.rule) for item in violations]


def _render(fmt: OutputFormat) -> str:
    results = ResultRecombinator().recombine(VIOLATIONS, fmt, engines=["regex", "pyast"])
    assert isinstance(results.results, str)
    return results.results


def test_json_round_trip() -> None:
    payload = json.loads(_render(OutputFormat.JSON))

    parsed = [Violation.model_validate(item) for item in payload["violations"]]
    assert _keys(parsed) == _keys(VIOLATIONS)
    assert payload["summary"]["pyast"] == {"file_count": 2, "violation_count": 2}


def test_sarif_round_trip() -> None:
    document = json.loads(_render(OutputFormat.SARIF))

    assert document["version"] == "2.1.0"
    runs = {run["tool"]["driver"]["name"]: run for run in document["runs"]}
    assert list(runs) == ["regex", "pyast"]
    keys: list[tuple[str, int | None, str]] = []
    for run in document["runs"]:
        for result in run["results"]:
            location = result["locations"][0]["physicalLocation"]
            keys.append((location["artifactLocation"]["uri"], location.get("region", {}).get("startLine"), result["ruleId"]))
    assert sorted(keys, key=str) == sorted(_keys(VIOLATIONS), key=str)
    levels = {result["ruleId"]: result["level"] for result in runs["regex"]["results"]}
    assert levels == {"NoTrailingWhitespace": "note", "NoHardcodedSecrets": "error"}


def test_xml_round_trip() -> None:
    root = ET.fromstring(_render(OutputFormat.XML))

    assert root.tag == "results"
    assert root.get("total") == "4"
    keys = [
        (element.get("file"), int(element.get("line")) if element.get("line") else None, element.get("rule"))
        for element in root.findall("violation")
    ]
    assert keys == _keys(VIOLATIONS)
    assert root.findall("violation")[-1].text == "<tag> & \"quote\""


def test_junit_groups_by_file() -> None:
    root = ET.fromstring(_render(OutputFormat.JUNIT))

    suites = root.findall("testsuite")
    assert [suite.get("name") for suite in suites] == ["src/a.py", "src/b.py", "src/c.py"]
    assert [len(suite.findall("testcase/failure")) for suite in suites] == [2, 1, 1]


def test_csv_header_and_rows() -> None:
    rows = list(csv.reader(io.StringIO(_render(OutputFormat.CSV))))

    assert tuple(rows[0]) == CSV_HEADER
    assert len(rows) == 1 + len(VIOLATIONS)
    assert rows[2][:4] == ["2", "1", "src/b.py", "10"]


def test_html_escapes_values_and_lists_summary() -> None:
    page = _render(OutputFormat.HTML)

    assert page.startswith("<!DOCTYPE html>")
    assert "&lt;tag&gt; &amp; &quot;quote&quot;" in page
    assert "<tag>" not in page
    assert "pyast: 2 violation(s) in 2 file(s)" in page
