# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Table of engines known to scanhub and the factory that instantiates them."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Final

from ..config import EngineConfig, ScannerConfig
from ..custom_paths import CustomRulePathManager
from ..errors import ConfigurationError
from ..events import EventChannel
from .base import RuleEngine
from .pyast import PythonAstEngine
from .regex import RegexEngine

LOGGER = logging.getLogger(__name__)

EngineConstructor = Callable[[EngineConfig, EventChannel, CustomRulePathManager | None], RuleEngine]


def _regex(config: EngineConfig, events: EventChannel, custom_paths: CustomRulePathManager | None) -> RuleEngine:
    return RegexEngine(config=config, events=events, custom_paths=custom_paths)


def _pyast(config: EngineConfig, events: EventChannel, _custom_paths: CustomRulePathManager | None) -> RuleEngine:
    return PythonAstEngine(config=config, events=events)


# Registration order is the engine order used by catalogs, selections and summaries.
ENGINE_FACTORIES: Final[Mapping[str, EngineConstructor]] = {
    RegexEngine.name: _regex,
    PythonAstEngine.name: _pyast,
}


class EnginePluginsFactory:
    """Instantiate the enabled engines from a registration table."""

    def __init__(self, factories: Mapping[str, EngineConstructor] | None = None) -> None:
        self._factories = dict(factories if factories is not None else ENGINE_FACTORIES)

    @property
    def known_engines(self) -> tuple[str, ...]:
        return tuple(self._factories)

    def create(
        self,
        config: ScannerConfig,
        events: EventChannel,
        custom_paths: CustomRulePathManager | None = None,
    ) -> list[RuleEngine]:
        """Return an engine for every registered name not disabled by ``config``.

        Args:
            config: Effective scanner configuration.
            events: Channel handed to each engine.
            custom_paths: Custom rule registry for engines that consume one.

        Returns:
            list[RuleEngine]: Engines in registration order.

        Raises:
            ConfigurationError: If ``config`` names an engine that is not registered.
        """

        unknown = sorted(name for name in config.engines if name not in self._factories)
        if unknown:
            known = ", ".join(self._factories)
            raise ConfigurationError(f"unknown engine(s) in configuration: {', '.join(unknown)} (known: {known})")
        engines: list[RuleEngine] = []
        for name, constructor in self._factories.items():
            if not config.is_engine_enabled(name):
                LOGGER.debug("engine %s disabled by configuration", name)
                continue
            engines.append(constructor(config.engine_config(name), events, custom_paths))
        return engines


__all__ = ["ENGINE_FACTORIES", "EngineConstructor", "EnginePluginsFactory"]
