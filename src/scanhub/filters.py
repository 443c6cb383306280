# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Attribute filters evaluated against catalog rules."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from .models import Rule


class FilterType(str, Enum):
    """Rule attribute a :class:`RuleFilter` inspects."""

    CATEGORY = "category"
    RULESET = "ruleset"
    LANGUAGE = "language"
    RULENAME = "rulename"
    ENGINE = "engine"
    TAG = "tag"


GROUP_FILTER_TYPES: frozenset[FilterType] = frozenset({FilterType.CATEGORY, FilterType.RULESET})


@dataclass(frozen=True, slots=True)
class RuleFilter:
    """Accept rules whose attribute overlaps any of ``values``."""

    filter_type: FilterType
    values: tuple[str, ...]

    def rule_values(self, rule: Rule) -> tuple[str, ...]:
        """Return the attribute of ``rule`` this filter compares against."""

        match self.filter_type:
            case FilterType.CATEGORY:
                return rule.categories
            case FilterType.RULESET:
                return rule.rulesets
            case FilterType.LANGUAGE:
                return rule.languages
            case FilterType.RULENAME:
                return (rule.name,)
            case FilterType.ENGINE:
                return (rule.engine,)
            case FilterType.TAG:
                return rule.tags
        return ()

    def matches(self, rule: Rule) -> bool:
        """Return ``True`` when the filter has no values or any value overlaps."""

        if not self.values:
            return True
        candidates = set(self.rule_values(rule))
        return any(value in candidates for value in self.values)

    def describe(self) -> str:
        return f"{self.filter_type.value}=[{', '.join(self.values)}]"


def rule_satisfies_filters(rule: Rule, filters: Sequence[RuleFilter]) -> bool:
    """Return whether ``rule`` passes every filter in ``filters``.

    With no filters the rule is accepted only when it is enabled by default.
    """

    if not filters:
        return rule.default_enabled
    return all(rule_filter.matches(rule) for rule_filter in filters)


def _clean(values: Iterable[str] | None) -> tuple[str, ...]:
    if not values:
        return ()
    cleaned: list[str] = []
    for value in values:
        for part in value.split(","):
            stripped = part.strip()
            if stripped and stripped not in cleaned:
                cleaned.append(stripped)
    return tuple(cleaned)


def build_rule_filters(
    *,
    categories: Iterable[str] | None = None,
    rulesets: Iterable[str] | None = None,
    languages: Iterable[str] | None = None,
    engines: Iterable[str] | None = None,
    rulenames: Iterable[str] | None = None,
    tags: Iterable[str] | None = None,
) -> list[RuleFilter]:
    """Build the filter list for the non-empty option values supplied.

    Comma-separated values are split so ``["a,b", "c"]`` yields three values.

    Returns:
        list[RuleFilter]: Filters in a stable order, one per populated option.
    """

    pairs = (
        (FilterType.CATEGORY, categories),
        (FilterType.RULESET, rulesets),
        (FilterType.LANGUAGE, languages),
        (FilterType.ENGINE, engines),
        (FilterType.RULENAME, rulenames),
        (FilterType.TAG, tags),
    )
    filters: list[RuleFilter] = []
    for filter_type, raw in pairs:
        values = _clean(raw)
        if values:
            filters.append(RuleFilter(filter_type=filter_type, values=values))
    return filters


def describe_filters(filters: Sequence[RuleFilter]) -> str:
    """Return a compact description of ``filters`` for trace logging."""

    return "; ".join(rule_filter.describe() for rule_filter in filters) or "<none>"


__all__ = [
    "FilterType",
    "GROUP_FILTER_TYPES",
    "RuleFilter",
    "build_rule_filters",
    "describe_filters",
    "rule_satisfies_filters",
]
