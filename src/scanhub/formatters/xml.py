# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Plain XML results document."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Sequence

from ..models import Violation
from .base import SummaryMap


def violation_attributes(violation: Violation) -> dict[str, str]:
    """Return the XML attribute map for ``violation``, skipping empty fields."""

    attributes = {
        "engine": violation.engine,
        "rule": violation.rule,
        "severity": str(violation.severity),
        "file": violation.file,
    }
    optional = {
        "line": violation.line,
        "column": violation.column,
        "endLine": violation.end_line,
        "endColumn": violation.end_column,
        "category": violation.category,
        "url": violation.resource_url,
    }
    attributes.update({key: str(value) for key, value in optional.items() if value is not None})
    return attributes


def format_xml(violations: Sequence[Violation], summary: SummaryMap) -> str:
    """Render ``<results total="N">`` with one ``<violation>`` element each."""

    _ = summary
    root = ET.Element("results", {"total": str(len(violations))})
    for violation in violations:
        element = ET.SubElement(root, "violation", violation_attributes(violation))
        element.text = violation.message
    ET.indent(root)
    return ET.tostring(root, encoding="unicode", xml_declaration=True) + "\n"


__all__ = ["format_xml", "violation_attributes"]
