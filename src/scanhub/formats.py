# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Output format identifiers and file-extension inference."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from .errors import ConfigurationError


class OutputFormat(str, Enum):
    """Encodings a set of results or rules can be rendered into."""

    TABLE = "table"
    CSV = "csv"
    XML = "xml"
    JUNIT = "junit"
    JSON = "json"
    SARIF = "sarif"
    HTML = "html"
    YAML = "yaml"

    @property
    def is_textual(self) -> bool:
        """Return ``True`` for formats rendered as a single string."""

        return self is not OutputFormat.TABLE


RESULT_FORMATS: frozenset[OutputFormat] = frozenset(
    {
        OutputFormat.TABLE,
        OutputFormat.CSV,
        OutputFormat.XML,
        OutputFormat.JUNIT,
        OutputFormat.JSON,
        OutputFormat.SARIF,
        OutputFormat.HTML,
    }
)


def infer_results_format(file: str | Path) -> OutputFormat:
    """Infer the results encoding for ``file`` from its extension.

    ``.sarif.json`` is recognised before the generic ``.json`` suffix.

    Args:
        file: Destination path supplied by the user.

    Returns:
        OutputFormat: Encoding implied by the extension.

    Raises:
        ConfigurationError: If the extension is not a supported results format.
    """

    name = str(file).lower()
    suffix = Path(name).suffix
    if suffix == ".csv":
        return OutputFormat.CSV
    if suffix in {".html", ".htm"}:
        return OutputFormat.HTML
    if suffix == ".sarif" or name.endswith(".sarif.json"):
        return OutputFormat.SARIF
    if suffix == ".json":
        return OutputFormat.JSON
    if suffix == ".xml":
        return OutputFormat.XML
    if suffix == ".junit":
        return OutputFormat.JUNIT
    raise ConfigurationError(f"unrecognized output file format for '{file}'")


def infer_rules_format(file: str | Path) -> OutputFormat:
    """Infer the rule listing encoding for ``file`` (``.json`` or ``.csv``)."""

    suffix = Path(str(file).lower()).suffix
    if suffix == ".json":
        return OutputFormat.JSON
    if suffix == ".csv":
        return OutputFormat.CSV
    raise ConfigurationError(f"unrecognized rules output file format for '{file}'")


def infer_config_format(file: str | Path) -> OutputFormat:
    """Return :attr:`OutputFormat.YAML` for ``.yaml``/``.yml`` files."""

    suffix = Path(str(file).lower()).suffix
    if suffix in {".yaml", ".yml"}:
        return OutputFormat.YAML
    raise ConfigurationError(f"unrecognized config output file format for '{file}'")


def validation_format(fmt: OutputFormat) -> OutputFormat:
    """Return the format used for file-compatibility checks (JUnit counts as XML)."""

    return OutputFormat.XML if fmt is OutputFormat.JUNIT else fmt


__all__ = [
    "OutputFormat",
    "RESULT_FORMATS",
    "infer_config_format",
    "infer_results_format",
    "infer_rules_format",
    "validation_format",
]
