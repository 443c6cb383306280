# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""The ``rules`` action: describe the rules a selector would run."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..config import ScannerConfig
from ..constants import ALL_SELECTOR, RECOMMENDED_TAG
from ..context import ScannerContext
from ..custom_paths import CustomRulePathManager
from ..engines.registry import EnginePluginsFactory
from ..events import EventChannel
from ..filters import build_rule_filters
from ..selectors import RuleSelection, SelectorToken, normalize_selectors
from ..viewers import ViewMode, rule_viewer_for
from ..writers import CompositeRulesWriter


@dataclass(frozen=True, slots=True)
class RulesOptions:
    """User choices for one ``rules`` invocation."""

    rule_selector: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    rulesets: tuple[str, ...] = ()
    languages: tuple[str, ...] = ()
    engines: tuple[str, ...] = ()
    view: ViewMode | None = None
    output_files: tuple[str, ...] = ()
    use_color: bool | None = None

    @property
    def has_filters(self) -> bool:
        return bool(self.categories or self.rulesets or self.languages or self.engines)

    @property
    def effective_selector(self) -> tuple[str, ...]:
        """Return the selector; filters alone imply ``all``, otherwise ``Recommended``."""

        if self.rule_selector:
            return self.rule_selector
        return (ALL_SELECTOR,) if self.has_filters else (RECOMMENDED_TAG,)

    @property
    def effective_view(self) -> ViewMode | None:
        if self.view is not None:
            return self.view
        return None if self.output_files else ViewMode.TABLE


async def list_rules(
    options: RulesOptions,
    *,
    config: ScannerConfig,
    events: EventChannel,
    factory: EnginePluginsFactory | None = None,
    custom_paths: CustomRulePathManager | None = None,
    catalog_file: Path | None = None,
) -> RuleSelection:
    """Resolve, display and optionally write the selected rules.

    Raises:
        ConfigurationError: For malformed selectors or unsupported output files.
    """

    writer = CompositeRulesWriter.from_files(options.output_files)
    for token in normalize_selectors(options.effective_selector):
        SelectorToken.parse(token)
    context = await ScannerContext.create(
        config,
        events,
        factory=factory,
        custom_paths=custom_paths,
        catalog_file=catalog_file,
    )
    filters = build_rule_filters(
        categories=options.categories,
        rulesets=options.rulesets,
        languages=options.languages,
        engines=options.engines,
    )
    candidates = context.catalog.get_rules_matching_filters(filters) if filters else context.catalog.catalog.rules
    selection = context.selector.select(candidates, options.effective_selector, context.engine_names)
    writer.write(selection)
    rule_viewer_for(options.effective_view, use_color=options.use_color).view(selection.rules)
    return selection


__all__ = ["RulesOptions", "list_rules"]
