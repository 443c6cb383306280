# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Self-contained HTML report."""

from __future__ import annotations

import html
from collections.abc import Sequence
from typing import Final

from ..models import Violation
from ..severity import severity_display
from .base import SummaryMap, optional_text

_STYLE: Final[str] = (
    "body{font-family:sans-serif;margin:2rem}"
    "table{border-collapse:collapse;width:100%}"
    "th,td{border:1px solid #ccc;padding:4px 8px;text-align:left;vertical-align:top}"
    "th{background:#f0f0f0}"
    "tr.sev-1 td,tr.sev-2 td{background:#fde8e8}"
    "tfoot td{font-style:italic}"
)

_COLUMNS: Final[tuple[str, ...]] = ("#", "Severity", "File", "Line", "Column", "Rule", "Engine", "Message")


def _esc(value: object) -> str:
    return html.escape(optional_text(value), quote=True)


def format_html(violations: Sequence[Violation], summary: SummaryMap) -> str:
    """Render a standalone page; every user-controlled value is escaped."""

    header = "".join(f"<th>{_esc(column)}</th>" for column in _COLUMNS)
    rows: list[str] = []
    for index, violation in enumerate(violations, start=1):
        rule = _esc(violation.rule)
        if violation.resource_url:
            rule = f'<a href="{_esc(violation.resource_url)}">{rule}</a>'
        cells = (
            _esc(index),
            _esc(severity_display(violation.severity)),
            _esc(violation.file),
            _esc(violation.line),
            _esc(violation.column),
            rule,
            _esc(violation.engine),
            _esc(violation.message),
        )
        rows.append(f'<tr class="sev-{violation.severity}">' + "".join(f"<td>{cell}</td>" for cell in cells) + "</tr>")
    footer = "".join(
        f'<tr><td colspan="{len(_COLUMNS)}">{_esc(engine)}: {entry.violation_count} violation(s) '
        f"in {entry.file_count} file(s)</td></tr>"
        for engine, entry in summary.items()
    )
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        "<title>scanhub results</title>\n"
        f"<style>{_STYLE}</style>\n</head>\n<body>\n"
        f"<h1>scanhub results</h1>\n<p>{len(violations)} violation(s)</p>\n"
        f"<table>\n<thead><tr>{header}</tr></thead>\n"
        f"<tbody>\n{chr(10).join(rows)}\n</tbody>\n"
        f"<tfoot>{footer}</tfoot>\n</table>\n</body>\n</html>\n"
    )


__all__ = ["format_html"]
