# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Aggregated rule catalog backed by a fingerprinted JSON cache."""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import ScannerConfig
from .constants import catalog_path
from .engines.base import RawCatalog, RuleEngine
from .errors import first_validation_error
from .events import CORE_SOURCE, EventChannel
from .filters import GROUP_FILTER_TYPES, FilterType, RuleFilter, describe_filters, rule_satisfies_filters
from .models import Catalog, Rule, RuleGroup

LOGGER = logging.getLogger(__name__)


def compute_catalog_fingerprint(engines: Sequence[RuleEngine]) -> str:
    """Return a SHA-256 digest of each engine's identity in registration order.

    Args:
        engines: Engines contributing to the catalog.

    Returns:
        str: Hex digest that changes whenever an engine is added, removed,
        reordered, upgraded or reconfigured in a catalog-visible way.
    """

    hasher = hashlib.sha256()
    for engine in engines:
        hasher.update(engine.get_name().encode("utf-8"))
        hasher.update(b"\0")
        hasher.update(engine.version.encode("utf-8"))
        hasher.update(b"\0")
        hasher.update(json.dumps(engine.catalog_inputs(), sort_keys=True, default=str).encode("utf-8"))
        hasher.update(b"\n")
    return hasher.hexdigest()


class LocalCatalog:
    """Read-only view over the rules every engine contributes.

    Instances are obtained from :meth:`open`; the constructor takes an already
    built :class:`Catalog`.
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        events: EventChannel,
        engine_names: Sequence[str],
        rejected_rules: int = 0,
        from_cache: bool = False,
    ) -> None:
        self._catalog = catalog
        self._events = events
        self._engine_names = tuple(engine_names)
        self.rejected_rules = rejected_rules
        self.from_cache = from_cache

    @classmethod
    async def open(
        cls,
        engines: Sequence[RuleEngine],
        *,
        events: EventChannel,
        cache_path: Path | None = None,
        config: ScannerConfig | None = None,
    ) -> LocalCatalog:
        """Build or reload the catalog for ``engines``.

        Args:
            engines: Initialized engines in registration order.
            events: Channel receiving rejected-rule and cache warnings.
            cache_path: JSON cache location; defaults to the scanner home file.
            config: Configuration whose rule overrides are applied.

        Returns:
            LocalCatalog: Ready catalog handle.
        """

        location = cache_path or catalog_path()
        fingerprint = compute_catalog_fingerprint(engines)
        cached = await asyncio.to_thread(_read_cache, location, fingerprint, events)
        rejected = 0
        if cached is not None:
            LOGGER.debug("reusing catalog cache %s", location)
            catalog = cached
        else:
            catalog, rejected = await _build(engines, events)
            await asyncio.to_thread(_write_cache, location, fingerprint, catalog, events)
        if config is not None:
            catalog = apply_rule_overrides(catalog, config)
        return cls(
            catalog,
            events=events,
            engine_names=[engine.get_name() for engine in engines],
            rejected_rules=rejected,
            from_cache=cached is not None,
        )

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def engine_names(self) -> tuple[str, ...]:
        return self._engine_names

    def get_rules_matching_filters(self, filters: Sequence[RuleFilter]) -> list[Rule]:
        """Return catalog rules passing every filter, in catalog order."""

        LOGGER.debug("matching rules against %s", describe_filters(filters))
        return [rule for rule in self._catalog.rules if rule_satisfies_filters(rule, filters)]

    def get_rule_groups_matching_filters(self, filters: Sequence[RuleFilter]) -> list[RuleGroup]:
        """Resolve category and ruleset filters to rule groups.

        With no group filters every category is returned and an info event is
        emitted for each one included implicitly.

        Args:
            filters: Filters supplied by the user.

        Returns:
            list[RuleGroup]: Matching groups in catalog order.
        """

        group_filters = [item for item in filters if item.filter_type in GROUP_FILTER_TYPES]
        if not group_filters:
            for group in self._catalog.categories:
                self._events.info(CORE_SOURCE, f"including category '{group.name}' of engine '{group.engine}'")
            return list(self._catalog.categories)
        engine_filter = next((item for item in filters if item.filter_type is FilterType.ENGINE), None)
        groups: list[RuleGroup] = []
        for group_filter in group_filters:
            pool = (
                self._catalog.categories
                if group_filter.filter_type is FilterType.CATEGORY
                else self._catalog.rulesets
            )
            for group in pool:
                if group_filter.values and group.name not in group_filter.values:
                    continue
                if engine_filter is not None and engine_filter.values and group.engine not in engine_filter.values:
                    continue
                if group not in groups:
                    groups.append(group)
        return groups


async def _build(engines: Sequence[RuleEngine], events: EventChannel) -> tuple[Catalog, int]:
    rules: list[Rule] = []
    categories: list[RuleGroup] = []
    rulesets: list[RuleGroup] = []
    rejected = 0
    for engine in engines:
        raw = await engine.get_catalog()
        engine_rules, engine_rejected = _validate_rules(engine.get_name(), raw, events)
        rules.extend(engine_rules)
        rejected += engine_rejected
        categories.extend(_validate_groups(engine.get_name(), raw.get("categories", ()), events))
        rulesets.extend(_validate_groups(engine.get_name(), raw.get("rulesets", ()), events))
    return Catalog(rules=tuple(rules), categories=tuple(categories), rulesets=tuple(rulesets)), rejected


def _validate_rules(engine: str, raw: RawCatalog, events: EventChannel) -> tuple[list[Rule], int]:
    rules: list[Rule] = []
    seen: set[str] = set()
    rejected = 0
    for entry in raw.get("rules", ()):
        payload = dict(entry) if isinstance(entry, Mapping) else {}
        payload.setdefault("engine", engine)
        try:
            rule = Rule.model_validate(payload)
        except ValidationError as exc:
            rejected += 1
            name = payload.get("name", "<unnamed>")
            events.error(CORE_SOURCE, f"rejected rule '{name}' from engine '{engine}': {first_validation_error(exc)}")
            continue
        if rule.name in seen:
            rejected += 1
            events.error(CORE_SOURCE, f"rejected duplicate rule '{rule.name}' from engine '{engine}'")
            continue
        seen.add(rule.name)
        rules.append(rule)
    return rules, rejected


def _validate_groups(engine: str, entries: Sequence[Mapping[str, Any]], events: EventChannel) -> list[RuleGroup]:
    groups: list[RuleGroup] = []
    for entry in entries:
        payload = dict(entry) if isinstance(entry, Mapping) else {}
        payload.setdefault("engine", engine)
        try:
            groups.append(RuleGroup.model_validate(payload))
        except ValidationError as exc:
            events.error(CORE_SOURCE, f"rejected rule group from engine '{engine}': {first_validation_error(exc)}")
    return groups


def apply_rule_overrides(catalog: Catalog, config: ScannerConfig) -> Catalog:
    """Return ``catalog`` with configured severity and tag overrides applied."""

    if not config.rules:
        return catalog
    updated: list[Rule] = []
    for rule in catalog.rules:
        override = config.rule_override(rule.engine, rule.name)
        if override is None:
            updated.append(rule)
            continue
        changes: dict[str, Any] = {}
        if override.severity is not None:
            changes["severity"] = override.severity
        if override.tags is not None:
            changes["tags"] = override.tags
        updated.append(rule.model_copy(update=changes))
    return catalog.model_copy(update={"rules": tuple(updated)})


def _read_cache(location: Path, fingerprint: str, events: EventChannel) -> Catalog | None:
    if not location.is_file():
        return None
    try:
        raw = json.loads(location.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        events.warn(CORE_SOURCE, f"discarding unreadable catalog cache {location}: {exc}")
        return None
    if not isinstance(raw, dict) or raw.get("fingerprint") != fingerprint:
        return None
    try:
        return Catalog.model_validate(raw.get("catalog", {}))
    except ValidationError as exc:
        events.warn(CORE_SOURCE, f"discarding malformed catalog cache {location}: {first_validation_error(exc)}")
        return None


def _write_cache(location: Path, fingerprint: str, catalog: Catalog, events: EventChannel) -> None:
    payload = {"fingerprint": fingerprint, "catalog": catalog.model_dump(mode="json")}
    try:
        location.parent.mkdir(parents=True, exist_ok=True)
        location.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as exc:
        events.warn(CORE_SOURCE, f"unable to write catalog cache {location}: {exc}")


__all__ = ["LocalCatalog", "apply_rule_overrides", "compute_catalog_fingerprint"]
