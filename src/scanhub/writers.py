# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File writers for results, rule listings, configuration and logs."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from pathlib import Path
from typing import IO, Protocol

from .config import ScannerConfig
from .constants import LOG_FILE_PREFIX
from .errors import ConfigurationError, RecombinationError
from .formats import (
    OutputFormat,
    infer_config_format,
    infer_results_format,
    infer_rules_format,
    validation_format,
)
from .formatters import get_formatter
from .models import RecombinedRuleResults
from .selectors import RuleSelection

ConfirmOverwrite = Callable[[Path], bool]


def _write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"unable to write '{path}': {exc}") from exc


def split_output_files(values: Iterable[str] | None) -> list[str]:
    """Flatten repeated and comma-delimited ``--output-file`` values."""

    files: list[str] = []
    for value in values or ():
        files.extend(part.strip() for part in value.split(",") if part.strip())
    return files


class ResultsWriter(Protocol):
    def write(self, results: RecombinedRuleResults) -> None: ...


class ResultsFileWriter:
    """Write results to one file in the encoding implied by its extension."""

    def __init__(self, file: str | Path, fmt: OutputFormat | None = None) -> None:
        """Bind the writer to ``file``.

        Args:
            file: Destination path.
            fmt: Explicit encoding; it must agree with the extension (JUnit may
                be written to an ``.xml`` file).

        Raises:
            ConfigurationError: If the extension is not a results format, does
                not agree with ``fmt``, or ``fmt`` is the table format.
        """

        self.file = Path(file)
        if fmt is OutputFormat.TABLE:
            raise ConfigurationError(f"table format cannot be written to a file ({file})")
        inferred = infer_results_format(file)
        if fmt is not None and validation_format(fmt) is not validation_format(inferred):
            raise ConfigurationError(f"output file '{file}' does not match the requested format '{fmt.value}'")
        self.format = fmt or inferred

    def write(self, results: RecombinedRuleResults) -> None:
        """Render ``results`` in this writer's format and write the file.

        The results are re-rendered when their format differs from the file's.
        """

        text = results.results
        if results.format is not self.format:
            text = get_formatter(self.format)(results.violations, results.summary_map)
        if not isinstance(text, str):
            raise RecombinationError(f"'{self.format.value}' output for {self.file} is not text")
        _write_text(self.file, text)


class CompositeResultsWriter:
    """Fan results out to several writers."""

    def __init__(self, writers: Sequence[ResultsWriter] = ()) -> None:
        self._writers = list(writers)

    @classmethod
    def from_files(cls, files: Iterable[str | Path], fmt: OutputFormat | None = None) -> CompositeResultsWriter:
        """Create one :class:`ResultsFileWriter` per file; validation errors surface immediately."""

        return cls([ResultsFileWriter(file, fmt) for file in files])

    def __len__(self) -> int:
        return len(self._writers)

    def write(self, results: RecombinedRuleResults) -> None:
        for writer in self._writers:
            writer.write(results)


class RulesFileWriter:
    """Write a rule selection as JSON or CSV."""

    def __init__(self, file: str | Path) -> None:
        self.file = Path(file)
        self.format = infer_rules_format(file)

    def write(self, selection: RuleSelection) -> None:
        _write_text(self.file, selection.to_formatted_output(self.format))


class CompositeRulesWriter:
    def __init__(self, writers: Sequence[RulesFileWriter] = ()) -> None:
        self._writers = list(writers)

    @classmethod
    def from_files(cls, files: Iterable[str | Path]) -> CompositeRulesWriter:
        return cls([RulesFileWriter(file) for file in files])

    def write(self, selection: RuleSelection) -> None:
        for writer in self._writers:
            writer.write(selection)


class ConfigFileWriter:
    """Write an effective configuration document as YAML.

    An existing file is only replaced when ``confirm`` approves it.
    """

    def __init__(self, file: Path, confirm: ConfirmOverwrite) -> None:
        self.file = file
        self._confirm = confirm

    @classmethod
    def from_file(cls, file: str | Path, confirm: ConfirmOverwrite) -> ConfigFileWriter:
        """Validate ``file``'s extension and bind the writer.

        Raises:
            ConfigurationError: If ``file`` is not ``.yaml`` or ``.yml``.
        """

        infer_config_format(file)
        return cls(Path(file), confirm)

    def write(self, text: str) -> bool:
        """Write ``text``; return ``False`` when the user declined to overwrite."""

        if self.file.exists() and not self._confirm(self.file):
            return False
        _write_text(self.file, text)
        return True


class LogFileWriter:
    """Append formatted event lines to a per-invocation log file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._handle: IO[str] | None = None

    @classmethod
    def from_config(cls, config: ScannerConfig, *, now: datetime | None = None) -> LogFileWriter:
        """Create a writer for a timestamped file inside the configured log folder."""

        stamp = (now or datetime.now()).strftime("%Y_%m_%d_%H_%M_%S_%f")
        return cls(config.log_folder / f"{LOG_FILE_PREFIX}-{stamp}.log")

    def write_to_log(self, message: str) -> None:
        if self._handle is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self.path.open("a", encoding="utf-8")
        self._handle.write(message)
        self._handle.flush()

    def close_log(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None


__all__ = [
    "CompositeResultsWriter",
    "CompositeRulesWriter",
    "ConfigFileWriter",
    "ConfirmOverwrite",
    "LogFileWriter",
    "ResultsFileWriter",
    "ResultsWriter",
    "RulesFileWriter",
    "split_output_files",
]
