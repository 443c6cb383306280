# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Deterministic rule engines used across the test-suite."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from scanhub.config import EngineConfig
from scanhub.engines.base import RawCatalog, RuleEngine
from scanhub.events import EventChannel
from scanhub.models import Rule, RuleGroup, RuleTarget, Violation


def stub_rule(engine: str, name: str, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": name,
        "engine": engine,
        "severity": 3,
        "tags": ["Recommended"],
        "categories": ["Best Practices"],
        "rulesets": [],
        "languages": ["apex"],
        "description": f"{name} description",
        "default_enabled": True,
    }
    payload.update(overrides)
    return payload


class StubEngine(RuleEngine):
    """Engine whose catalog and run behaviour are fixed at construction."""

    def __init__(
        self,
        name: str,
        rules: Sequence[Mapping[str, Any]],
        *,
        violations: Sequence[Violation] = (),
        error: BaseException | None = None,
        delay: float = 0.0,
        patterns: Sequence[str] = ("**/*",),
        version: str = "1.0.0",
        categories: Sequence[str] = (),
        events: EventChannel | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        super().__init__(config=config, events=events)
        self.name = name  # type: ignore[misc]
        self.version = version  # type: ignore[misc]
        self.default_target_patterns = tuple(patterns)  # type: ignore[misc]
        self._rules = [dict(rule) for rule in rules]
        self._violations = list(violations)
        self._error = error
        self._delay = delay
        self._categories = list(categories)
        self.catalog_calls = 0
        self.run_calls: list[tuple[tuple[str, ...], tuple[RuleTarget, ...]]] = []
        self.cancelled = False

    async def get_catalog(self) -> RawCatalog:
        self.catalog_calls += 1
        return {
            "rules": self._rules,
            "categories": [{"name": name, "engine": self.name, "paths": []} for name in self._categories],
            "rulesets": [],
        }

    async def run(
        self,
        groups: Sequence[RuleGroup],
        rules: Sequence[Rule],
        targets: Sequence[RuleTarget],
    ) -> list[Violation]:
        self.run_calls.append((tuple(rule.name for rule in rules), tuple(targets)))
        try:
            if self._delay:
                await asyncio.sleep(self._delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self._error is not None:
            raise self._error
        return list(self._violations)


def make_violation(engine: str, rule: str, file: str, line: int, severity: int = 3) -> Violation:
    return Violation(rule=rule, engine=engine, severity=severity, file=file, line=line, column=1, message=f"{rule} hit")


def engine_a(**kwargs: Any) -> StubEngine:
    """Engine ``A`` with five default-enabled rules."""

    return StubEngine("A", [stub_rule("A", f"A{index}") for index in range(1, 6)], **kwargs)


def engine_b(**kwargs: Any) -> StubEngine:
    """Engine ``B`` with three default-enabled rules and one opt-in rule."""

    rules = [stub_rule("B", f"B{index}", languages=["javascript"]) for index in range(1, 4)]
    rules.append(stub_rule("B", "BOptIn", tags=[], default_enabled=False, severity=1))
    return StubEngine("B", rules, **kwargs)
