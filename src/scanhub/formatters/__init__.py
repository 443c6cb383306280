# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Result formatters keyed by :class:`~scanhub.formats.OutputFormat`."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

from ..errors import RecombinationError
from ..formats import OutputFormat
from .base import ResultsFormatter, SummaryMap
from .csv import format_csv
from .html import format_html
from .json import format_json
from .junit import format_junit
from .sarif import format_sarif
from .table import format_table
from .xml import format_xml

FORMATTERS: Final[Mapping[OutputFormat, ResultsFormatter]] = {
    OutputFormat.TABLE: format_table,
    OutputFormat.CSV: format_csv,
    OutputFormat.XML: format_xml,
    OutputFormat.JUNIT: format_junit,
    OutputFormat.JSON: format_json,
    OutputFormat.SARIF: format_sarif,
    OutputFormat.HTML: format_html,
}


def get_formatter(fmt: OutputFormat) -> ResultsFormatter:
    """Return the formatter registered for ``fmt``.

    Raises:
        RecombinationError: If no results formatter handles ``fmt``.
    """

    try:
        return FORMATTERS[fmt]
    except KeyError as exc:
        raise RecombinationError(f"no results formatter registered for '{fmt.value}'") from exc


__all__ = ["FORMATTERS", "ResultsFormatter", "SummaryMap", "get_formatter"]
