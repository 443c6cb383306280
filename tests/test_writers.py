# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for file writers and format inference."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from scanhub.config import ScannerConfig
from scanhub.errors import ConfigurationError
from scanhub.formats import OutputFormat, infer_results_format
from scanhub.recombine import ResultRecombinator
from scanhub.writers import (
    CompositeResultsWriter,
    ConfigFileWriter,
    LogFileWriter,
    ResultsFileWriter,
    split_output_files,
)
from tests.stubs import make_violation


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("out.csv", OutputFormat.CSV),
        ("out.XML", OutputFormat.XML),
        ("out.junit", OutputFormat.JUNIT),
        ("out.json", OutputFormat.JSON),
        ("out.sarif", OutputFormat.SARIF),
        ("out.sarif.json", OutputFormat.SARIF),
        ("out.html", OutputFormat.HTML),
        ("out.htm", OutputFormat.HTML),
    ],
)
def test_infer_results_format(name: str, expected: OutputFormat) -> None:
    assert infer_results_format(name) is expected


def test_unknown_extension_fails_writer_construction() -> None:
    with pytest.raises(ConfigurationError, match="unrecognized"):
        ResultsFileWriter("out.txt")


def test_table_format_cannot_target_a_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="table format"):
        ResultsFileWriter(tmp_path / "out.json", OutputFormat.TABLE)
    assert not (tmp_path / "out.json").exists()


def test_explicit_format_must_agree_with_extension(tmp_path: Path) -> None:
    writer = ResultsFileWriter(tmp_path / "out.xml", OutputFormat.JUNIT)

    assert writer.format is OutputFormat.JUNIT
    with pytest.raises(ConfigurationError, match="does not match"):
        ResultsFileWriter(tmp_path / "out.csv", OutputFormat.JSON)


def test_composite_writer_fans_out(tmp_path: Path) -> None:
    results = ResultRecombinator().recombine(
        [make_violation("A", "A1", "x.cls", 1)], OutputFormat.TABLE, engines=["A"]
    )
    files = [tmp_path / "out.json", tmp_path / "nested" / "out.csv"]

    CompositeResultsWriter.from_files(files).write(results)

    assert json.loads(files[0].read_text(encoding="utf-8"))["violations"][0]["rule"] == "A1"
    assert files[1].read_text(encoding="utf-8").startswith("Problem,Severity")


def test_split_output_files() -> None:
    assert split_output_files(["a.json,b.csv", " c.html "]) == ["a.json", "b.csv", "c.html"]
    assert split_output_files(None) == []


def test_config_writer_requires_yaml_extension(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        ConfigFileWriter.from_file(tmp_path / "config.json", confirm=lambda path: True)


def test_config_writer_asks_before_overwriting(tmp_path: Path) -> None:
    target = tmp_path / "scanhub.yml"
    target.write_text("original\n", encoding="utf-8")
    prompts: list[Path] = []

    def decline(path: Path) -> bool:
        prompts.append(path)
        return False

    written = ConfigFileWriter.from_file(target, decline).write("replacement\n")

    assert written is False
    assert prompts == [target]
    assert target.read_text(encoding="utf-8") == "original\n"
    assert ConfigFileWriter.from_file(target, lambda path: True).write("replacement\n") is True
    assert target.read_text(encoding="utf-8") == "replacement\n"


def test_log_file_writer_creates_timestamped_file(tmp_path: Path) -> None:
    config = ScannerConfig(log_folder=tmp_path / "logs")
    writer = LogFileWriter.from_config(config, now=datetime(2025, 1, 2, 3, 4, 5, 6))

    writer.write_to_log("first\n")
    writer.write_to_log("second\n")
    writer.close_log()

    assert writer.path.name == "scanhub-2025_01_02_03_04_05_000006.log"
    assert writer.path.read_text(encoding="utf-8") == "first\nsecond\n"
