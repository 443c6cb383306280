# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolution of rule selector tokens against the catalog."""

from __future__ import annotations

import csv
import io
import json
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from .constants import ALL_SELECTOR, RECOMMENDED_TAG
from .errors import ConfigurationError
from .formats import OutputFormat
from .models import Rule
from .severity import try_parse_severity

_DELIMITERS = re.compile(r"[\s,]+")

RULE_CSV_COLUMNS: tuple[str, ...] = (
    "name",
    "engine",
    "severity",
    "tags",
    "categories",
    "rulesets",
    "languages",
    "description",
    "resource_urls",
)


def normalize_selectors(raw: Iterable[str]) -> list[str]:
    """Split ``raw`` selector strings on commas and whitespace.

    Args:
        raw: Selector values exactly as supplied on the command line.

    Returns:
        list[str]: Flat list of non-empty selector tokens.
    """

    tokens: list[str] = []
    for value in raw:
        tokens.extend(part for part in _DELIMITERS.split(value) if part)
    return tokens


@dataclass(frozen=True, slots=True)
class SelectorToken:
    """Conjunction of ``:``-separated terms parsed from one selector token."""

    raw: str
    terms: tuple[str, ...]

    @classmethod
    def parse(cls, token: str) -> SelectorToken:
        """Parse ``token`` into its terms.

        Raises:
            ConfigurationError: If any term is empty.
        """

        terms = tuple(term.strip() for term in token.split(":"))
        if not terms or any(not term for term in terms):
            raise ConfigurationError(f"malformed rule selector '{token}': selector terms must not be empty")
        return cls(raw=token, terms=terms)

    def matches(self, rule: Rule) -> bool:
        return all(term_matches(term, rule) for term in self.terms)


def term_matches(term: str, rule: Rule) -> bool:
    """Return whether a single selector ``term`` matches ``rule``."""

    lowered = term.lower()
    if lowered == ALL_SELECTOR:
        return True
    if lowered == RECOMMENDED_TAG.lower() and rule.default_enabled:
        return True
    if lowered in {rule.engine.lower(), rule.name.lower()}:
        return True
    for values in (rule.tags, rule.categories, rule.rulesets, rule.languages):
        if any(lowered == value.lower() for value in values):
            return True
    severity = try_parse_severity(term)
    return severity is not None and int(severity) == rule.severity


class RuleSelection:
    """Ordered, duplicate-free set of rules chosen by a selector."""

    def __init__(self, rules: Sequence[Rule]) -> None:
        self._rules = tuple(rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    @property
    def count(self) -> int:
        return len(self._rules)

    @property
    def engine_names(self) -> list[str]:
        """Return engines owning selected rules, in selection order."""

        names: list[str] = []
        for rule in self._rules:
            if rule.engine not in names:
                names.append(rule.engine)
        return names

    def get_rules_for(self, engine: str) -> list[Rule]:
        return [rule for rule in self._rules if rule.engine == engine]

    def to_formatted_output(self, fmt: OutputFormat) -> str:
        """Render the selection as JSON or CSV for a rules output file.

        Raises:
            ConfigurationError: If ``fmt`` is not JSON or CSV.
        """

        if fmt is OutputFormat.JSON:
            payload = [rule.model_dump(mode="json") for rule in self._rules]
            return json.dumps(payload, indent=2, sort_keys=True)
        if fmt is OutputFormat.CSV:
            buffer = io.StringIO()
            writer = csv.writer(buffer, lineterminator="\n")
            writer.writerow(RULE_CSV_COLUMNS)
            for rule in self._rules:
                writer.writerow(
                    [
                        rule.name,
                        rule.engine,
                        rule.severity,
                        ",".join(rule.tags),
                        ",".join(rule.categories),
                        ",".join(rule.rulesets),
                        ",".join(rule.languages),
                        rule.description,
                        ",".join(rule.resource_urls),
                    ]
                )
            return buffer.getvalue()
        raise ConfigurationError(f"rules cannot be written as '{fmt.value}'")


class RuleSelector:
    """Resolve selector tokens to a :class:`RuleSelection`."""

    def select(self, rules: Sequence[Rule], tokens: Iterable[str], engine_order: Sequence[str] = ()) -> RuleSelection:
        """Return the union of rules matched by ``tokens``.

        Rules are ordered by ``engine_order`` (engines not listed follow in
        first-seen order), then by their position in ``rules``.

        Args:
            rules: Catalog rules in discovery order.
            tokens: Selector tokens; they are normalised first.
            engine_order: Engine registration order.

        Returns:
            RuleSelection: Possibly empty selection.

        Raises:
            ConfigurationError: If a token is malformed.
        """

        parsed = [SelectorToken.parse(token) for token in normalize_selectors(tokens)]
        chosen = [rule for rule in rules if any(token.matches(rule) for token in parsed)]
        rank = {name: index for index, name in enumerate(engine_order)}
        for rule in rules:
            rank.setdefault(rule.engine, len(rank))
        position = {rule.key: index for index, rule in enumerate(rules)}
        chosen.sort(key=lambda rule: (rank[rule.engine], position[rule.key]))
        return RuleSelection(chosen)


__all__ = [
    "RULE_CSV_COLUMNS",
    "RuleSelection",
    "RuleSelector",
    "SelectorToken",
    "normalize_selectors",
    "term_matches",
]
