# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the custom rule path registry."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from scanhub.custom_paths import CustomRulePathManager, determine_engine_for_path
from scanhub.errors import ConfigurationError


def test_missing_or_blank_registry_is_empty(tmp_path: Path) -> None:
    assert CustomRulePathManager.open(tmp_path / "absent.json").get_rule_path_entries("regex") == {}
    blank = tmp_path / "blank.json"
    blank.write_text("  \n", encoding="utf-8")
    assert CustomRulePathManager.open(blank).get_rule_path_entries("regex") == {}


def test_invalid_registry_raises(tmp_path: Path) -> None:
    broken = tmp_path / "paths.json"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="not valid JSON"):
        CustomRulePathManager.open(broken)


def test_default_location_lives_in_scanner_home(scanner_home: Path) -> None:
    assert CustomRulePathManager.open().path.parent == scanner_home


def test_add_paths_expands_directories_and_persists(tmp_path: Path) -> None:
    rules_dir = tmp_path / "rules"
    (rules_dir / "nested").mkdir(parents=True)
    (rules_dir / "b.yml").write_text("[]\n", encoding="utf-8")
    (rules_dir / "a.json").write_text("[]\n", encoding="utf-8")
    (rules_dir / "README.md").write_text("docs\n", encoding="utf-8")
    (rules_dir / "nested" / "deep.yml").write_text("[]\n", encoding="utf-8")
    registry_file = tmp_path / "paths.json"

    added = CustomRulePathManager.open(registry_file).add_paths_for_language("python", [rules_dir])

    expected = [(rules_dir / "a.json").resolve().as_posix(), (rules_dir / "b.yml").resolve().as_posix()]
    assert added == expected
    assert json.loads(registry_file.read_text(encoding="utf-8")) == {"regex": {"python": expected}}
    reopened = CustomRulePathManager.open(registry_file)
    assert reopened.get_rule_path_entries("regex") == {"python": expected}


def test_add_paths_does_not_duplicate_entries(tmp_path: Path) -> None:
    rule_file = tmp_path / "rules.yaml"
    rule_file.write_text("[]\n", encoding="utf-8")
    registry = CustomRulePathManager.open(tmp_path / "paths.json")

    registry.add_paths_for_language("java", [rule_file])
    registry.add_paths_for_language("java", [rule_file])

    assert registry.get_rule_path_entries("regex") == {"java": [rule_file.resolve().as_posix()]}


def test_add_paths_rejects_missing_paths(tmp_path: Path) -> None:
    registry = CustomRulePathManager.open(tmp_path / "paths.json")

    with pytest.raises(ConfigurationError, match="does not exist"):
        registry.add_paths_for_language("python", [tmp_path / "missing.yml"])
    assert not (tmp_path / "paths.json").exists()


@pytest.mark.parametrize(
    ("name", "expected"),
    [("rules.yml", "regex"), ("rules.YAML", "regex"), ("rules.json", "regex"), ("rules.xml", None)],
)
def test_determine_engine_for_path(name: str, expected: str | None) -> None:
    assert determine_engine_for_path(Path(name)) == expected
