# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Concurrent, all-or-nothing execution of the selected engines."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .engines.base import RuleEngine
from .errors import EngineExecutionError
from .events import CORE_SOURCE, EventChannel
from .models import Rule, RuleGroup, RuleTarget, Violation
from .selectors import RuleSelection
from .targets import TargetResolver

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EnginePartition:
    """Work assigned to a single engine for one dispatch."""

    engine: RuleEngine
    rules: tuple[Rule, ...]
    groups: tuple[RuleGroup, ...]
    targets: tuple[RuleTarget, ...]


class EngineDispatcher:
    """Run every engine with selected rules and merge their violations.

    Engine runs start together and are joined with a single wait. When one
    engine raises, the others are cancelled and the dispatch fails as a whole.
    """

    def __init__(self, engines: Sequence[RuleEngine], resolver: TargetResolver, events: EventChannel) -> None:
        self._engines = tuple(engines)
        self._resolver = resolver
        self._events = events
        self.dispatched_engines: list[str] = []

    async def partition(
        self,
        selection: RuleSelection,
        groups: Sequence[RuleGroup],
        targets: Sequence[str],
    ) -> list[EnginePartition]:
        """Split the selection, groups and resolved targets by engine.

        Engines with no selected rules are omitted.
        """

        partitions: list[EnginePartition] = []
        for engine in self._engines:
            name = engine.get_name()
            rules = tuple(selection.get_rules_for(name))
            if not rules:
                continue
            resolved = await self._resolver.resolve_all(engine, targets)
            partitions.append(
                EnginePartition(
                    engine=engine,
                    rules=rules,
                    groups=tuple(group for group in groups if group.engine == name),
                    targets=tuple(resolved),
                )
            )
        return partitions

    async def dispatch(
        self,
        selection: RuleSelection,
        groups: Sequence[RuleGroup],
        targets: Sequence[str],
    ) -> list[Violation]:
        """Execute the selection and return the concatenated violations.

        Args:
            selection: Rules to evaluate.
            groups: Rule groups resolved from the user's filters.
            targets: Raw user targets; each engine resolves them with its own patterns.

        Returns:
            list[Violation]: Violations in engine partition order, each batch
            in the order its engine emitted it.

        Raises:
            EngineExecutionError: If any engine run raises.
        """

        partitions = await self.partition(selection, groups, targets)
        self.dispatched_engines = [item.engine.get_name() for item in partitions]
        if not partitions:
            return []
        tasks = [
            asyncio.create_task(self._run_engine(item), name=f"engine:{item.engine.get_name()}")
            for item in partitions
        ]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        failed = next((task for task in tasks if task in done and task.exception() is not None), None)
        if failed is not None:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            index = tasks.index(failed)
            engine = partitions[index].engine.get_name()
            error = failed.exception()
            LOGGER.debug("engine %s failed; cancelled %d sibling(s)", engine, len(pending))
            if isinstance(error, EngineExecutionError):
                raise error
            raise EngineExecutionError(engine, str(error) or type(error).__name__) from error
        violations: list[Violation] = []
        for task in tasks:
            violations.extend(task.result())
        return violations

    async def _run_engine(self, item: EnginePartition) -> list[Violation]:
        name = item.engine.get_name()
        self._events.debug(
            CORE_SOURCE,
            f"running engine '{name}' with {len(item.rules)} rule(s) over {len(item.targets)} target(s)",
        )
        result = await item.engine.run(item.groups, item.rules, item.targets)
        self._events.debug(CORE_SOURCE, f"engine '{name}' reported {len(result)} violation(s)")
        return list(result)


__all__ = ["EngineDispatcher", "EnginePartition"]
