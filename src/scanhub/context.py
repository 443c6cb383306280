# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-invocation dependency container threaded through the actions."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from .catalog import LocalCatalog
from .config import ScannerConfig
from .custom_paths import CustomRulePathManager
from .dispatch import EngineDispatcher
from .engines.base import RuleEngine
from .engines.registry import EnginePluginsFactory
from .events import EventChannel
from .recombine import ResultRecombinator
from .selectors import RuleSelector
from .targets import TargetResolver


@dataclass(frozen=True, slots=True)
class ScannerContext:
    """Collaborators shared by every stage of one scanhub invocation."""

    config: ScannerConfig
    events: EventChannel
    engines: tuple[RuleEngine, ...]
    catalog: LocalCatalog
    selector: RuleSelector
    resolver: TargetResolver
    dispatcher: EngineDispatcher
    recombinator: ResultRecombinator

    @classmethod
    async def create(
        cls,
        config: ScannerConfig,
        events: EventChannel,
        *,
        factory: EnginePluginsFactory | None = None,
        custom_paths: CustomRulePathManager | None = None,
        catalog_file: Path | None = None,
        cwd: Path | None = None,
    ) -> ScannerContext:
        """Instantiate and initialise engines, then open the catalog.

        Args:
            config: Effective configuration.
            events: Channel shared by every component.
            factory: Engine factory; defaults to the built-in registration table.
            custom_paths: Custom rule registry; loaded from the scanner home when omitted.
            catalog_file: Catalog cache override.
            cwd: Directory targets are resolved against.

        Returns:
            ScannerContext: Ready-to-use container.
        """

        registry = custom_paths if custom_paths is not None else CustomRulePathManager.open()
        engines = tuple((factory or EnginePluginsFactory()).create(config, events, registry))
        await asyncio.gather(*(engine.init() for engine in engines))
        catalog = await LocalCatalog.open(engines, events=events, cache_path=catalog_file, config=config)
        resolver = TargetResolver(events, cwd)
        return cls(
            config=config,
            events=events,
            engines=engines,
            catalog=catalog,
            selector=RuleSelector(),
            resolver=resolver,
            dispatcher=EngineDispatcher(engines, resolver, events),
            recombinator=ResultRecombinator(),
        )

    @property
    def engine_names(self) -> list[str]:
        return [engine.get_name() for engine in self.engines]


__all__ = ["ScannerContext"]
