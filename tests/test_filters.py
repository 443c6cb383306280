# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for rule attribute filters."""

from __future__ import annotations

from scanhub.filters import FilterType, RuleFilter, build_rule_filters, rule_satisfies_filters
from scanhub.models import Rule
from tests.stubs import stub_rule


def _rules() -> list[Rule]:
    return [
        Rule.model_validate(stub_rule("A", "A1", languages=["apex"], categories=["Security"])),
        Rule.model_validate(stub_rule("A", "A2", languages=["javascript"], categories=["Security"])),
        Rule.model_validate(stub_rule("B", "B1", languages=["apex"], categories=["Style"])),
        Rule.model_validate(stub_rule("B", "B2", languages=["apex"], default_enabled=False)),
    ]


def test_filters_are_conjunctive() -> None:
    language = RuleFilter(FilterType.LANGUAGE, ("apex",))
    category = RuleFilter(FilterType.CATEGORY, ("Security",))

    for rule in _rules():
        both = rule_satisfies_filters(rule, [language, category])
        assert both == (language.matches(rule) and category.matches(rule))


def test_filter_values_are_disjunctive() -> None:
    engines = RuleFilter(FilterType.ENGINE, ("A", "B"))

    assert all(engines.matches(rule) for rule in _rules())


def test_empty_filter_values_match_everything() -> None:
    assert all(RuleFilter(FilterType.TAG, ()).matches(rule) for rule in _rules())


def test_zero_filters_select_default_enabled_rules() -> None:
    selected = [rule.name for rule in _rules() if rule_satisfies_filters(rule, [])]

    assert selected == ["A1", "A2", "B1"]


def test_build_rule_filters_splits_and_skips_empty_options() -> None:
    filters = build_rule_filters(languages=["apex,javascript", "apex"], engines=[], tags=None)

    assert filters == [RuleFilter(FilterType.LANGUAGE, ("apex", "javascript"))]
