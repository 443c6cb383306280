# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JUnit XML results: one suite per file, one failing case per violation."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Sequence

from ..models import Violation
from ..severity import severity_display
from .base import SummaryMap, location_text


def format_junit(violations: Sequence[Violation], summary: SummaryMap) -> str:
    _ = summary
    by_file: dict[str, list[Violation]] = {}
    for violation in violations:
        by_file.setdefault(violation.file, []).append(violation)
    root = ET.Element(
        "testsuites",
        {"name": "scanhub", "tests": str(len(violations)), "failures": str(len(violations))},
    )
    for file, entries in by_file.items():
        suite = ET.SubElement(
            root,
            "testsuite",
            {"name": file, "tests": str(len(entries)), "failures": str(len(entries)), "errors": "0"},
        )
        for violation in entries:
            case = ET.SubElement(
                suite,
                "testcase",
                {"name": f"{violation.engine}.{violation.rule}", "classname": file},
            )
            failure = ET.SubElement(
                case,
                "failure",
                {"message": violation.message, "type": severity_display(violation.severity)},
            )
            failure.text = f"{location_text(violation)} {violation.message}"
    ET.indent(root)
    return ET.tostring(root, encoding="unicode", xml_declaration=True) + "\n"


__all__ = ["format_junit"]
