# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for catalog aggregation, caching and overrides."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from scanhub.catalog import LocalCatalog, compute_catalog_fingerprint
from scanhub.config import RuleOverride, ScannerConfig
from scanhub.events import CollectingListener, EventChannel, LogLevel
from scanhub.filters import FilterType, RuleFilter
from tests.stubs import StubEngine, engine_a, engine_b, stub_rule


def _open(engines: list[StubEngine], cache: Path, events: EventChannel, **kwargs: object) -> LocalCatalog:
    return asyncio.run(LocalCatalog.open(engines, events=events, cache_path=cache, **kwargs))  # type: ignore[arg-type]


def test_catalog_concatenates_engines_in_registration_order(tmp_path: Path, events: EventChannel) -> None:
    catalog = _open([engine_a(), engine_b()], tmp_path / "Catalog.json", events)

    engines = [rule.engine for rule in catalog.catalog.rules]
    assert engines == ["A"] * 5 + ["B"] * 4
    assert catalog.engine_names == ("A", "B")
    assert catalog.rejected_rules == 0


def test_malformed_rules_are_rejected_and_reported(
    tmp_path: Path, events: EventChannel, collector: CollectingListener
) -> None:
    engine = StubEngine(
        "A",
        [stub_rule("A", "Good"), stub_rule("A", "BadSeverity", severity=9), {"severity": 2}],
    )

    catalog = _open([engine], tmp_path / "Catalog.json", events)

    assert [rule.name for rule in catalog.catalog.rules] == ["Good"]
    assert catalog.rejected_rules == 2
    errors = collector.messages(LogLevel.ERROR)
    assert len(errors) == 2
    assert "BadSeverity" in errors[0]


def test_duplicate_rule_names_keep_the_first_definition(
    tmp_path: Path, events: EventChannel, collector: CollectingListener
) -> None:
    engine = StubEngine("A", [stub_rule("A", "A1"), stub_rule("A", "A1", severity=1), stub_rule("A", "A2")])

    catalog = _open([engine], tmp_path / "Catalog.json", events)

    assert [(rule.name, rule.severity) for rule in catalog.catalog.rules] == [("A1", 3), ("A2", 3)]
    assert catalog.rejected_rules == 1
    errors = collector.messages(LogLevel.ERROR)
    assert errors == ["rejected duplicate rule 'A1' from engine 'A'"]


def test_cache_is_reused_when_fingerprint_matches(tmp_path: Path, events: EventChannel) -> None:
    cache = tmp_path / "Catalog.json"
    first_engine = engine_a()
    _open([first_engine], cache, events)

    second_engine = engine_a()
    reopened = _open([second_engine], cache, events)

    assert reopened.from_cache is True
    assert second_engine.catalog_calls == 0
    assert len(reopened.catalog.rules) == 5
    stored = json.loads(cache.read_text(encoding="utf-8"))
    assert stored["fingerprint"] == compute_catalog_fingerprint([second_engine])


def test_version_change_invalidates_cache(tmp_path: Path, events: EventChannel) -> None:
    cache = tmp_path / "Catalog.json"
    _open([engine_a()], cache, events)

    upgraded = engine_a(version="2.0.0")
    reopened = _open([upgraded], cache, events)

    assert reopened.from_cache is False
    assert upgraded.catalog_calls == 1


def test_malformed_cache_is_rebuilt_with_warning(
    tmp_path: Path, events: EventChannel, collector: CollectingListener
) -> None:
    cache = tmp_path / "Catalog.json"
    cache.write_text("{not json", encoding="utf-8")

    catalog = _open([engine_a()], cache, events)

    assert len(catalog.catalog.rules) == 5
    assert any("discarding" in message for message in collector.messages(LogLevel.WARN))
    assert json.loads(cache.read_text(encoding="utf-8"))["catalog"]["rules"]


def test_rule_overrides_are_applied(tmp_path: Path, events: EventChannel) -> None:
    config = ScannerConfig(rules={"A": {"A2": RuleOverride(severity="critical", tags=("Custom",))}})

    catalog = _open([engine_a()], tmp_path / "Catalog.json", events, config=config)

    a2 = next(rule for rule in catalog.catalog.rules if rule.name == "A2")
    assert a2.severity == 1
    assert a2.tags == ("Custom",)


def test_rules_matching_filters(tmp_path: Path, events: EventChannel) -> None:
    catalog = _open([engine_a(), engine_b()], tmp_path / "Catalog.json", events)

    javascript = catalog.get_rules_matching_filters([RuleFilter(FilterType.LANGUAGE, ("javascript",))])
    defaults = catalog.get_rules_matching_filters([])

    assert [rule.name for rule in javascript] == ["B1", "B2", "B3"]
    assert len(defaults) == 8


def test_groups_default_to_all_categories_with_info_events(
    tmp_path: Path, events: EventChannel, collector: CollectingListener
) -> None:
    engines = [engine_a(categories=["Security", "Style"]), engine_b(categories=["Performance"])]
    catalog = _open(engines, tmp_path / "Catalog.json", events)

    groups = catalog.get_rule_groups_matching_filters([])
    filtered = catalog.get_rule_groups_matching_filters([RuleFilter(FilterType.CATEGORY, ("Style",))])

    assert [group.name for group in groups] == ["Security", "Style", "Performance"]
    assert len(collector.messages(LogLevel.INFO)) == 3
    assert [(group.engine, group.name) for group in filtered] == [("A", "Style")]
