# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Capability contract implemented by every rule engine."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Final

from ..config import EngineConfig
from ..events import EventChannel
from ..models import Rule, RuleGroup, RuleTarget, Violation

RawCatalog = Mapping[str, Sequence[Mapping[str, Any]]]

EXTENSION_LANGUAGES: Final[dict[str, str]] = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".java": "java",
    ".cls": "apex",
    ".trigger": "apex",
    ".md": "markdown",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".json": "json",
    ".txt": "text",
}

_SKIPPED_WALK_DIRS: Final[frozenset[str]] = frozenset({".git", "__pycache__"})


@dataclass(frozen=True, slots=True)
class TargetFile:
    """A file to analyse and the path reported for it in violations."""

    path: Path
    display: str


def language_for(path: Path) -> str | None:
    """Return the language implied by ``path``'s extension, if known."""

    return EXTENSION_LANGUAGES.get(path.suffix.lower())


class RuleEngine(ABC):
    """Abstract rule engine consumed by the catalog and the dispatcher.

    Concrete engines declare a ``name`` and ``version``, publish their rules via
    :meth:`get_catalog` and evaluate selected rules in :meth:`run`. ``run`` may
    raise; the dispatcher treats any exception as a failure of the whole
    invocation. Problems confined to a single input file should instead be
    reported through :meth:`warn` and the file skipped.
    """

    name: ClassVar[str]
    version: ClassVar[str] = "1.0.0"
    default_target_patterns: ClassVar[tuple[str, ...]] = ()

    def __init__(self, *, config: EngineConfig | None = None, events: EventChannel | None = None) -> None:
        """Bind the engine to its configuration and event channel.

        Args:
            config: Engine-specific configuration; defaults when omitted.
            events: Channel receiving engine warnings and log messages.
        """

        self.config = config or EngineConfig()
        self.events = events or EventChannel()
        self._initialized = False

    def get_name(self) -> str:
        """Return the engine identifier."""

        return self.name

    async def init(self) -> None:
        """Run one-time setup; repeated calls are no-ops."""

        if self._initialized:
            return
        await self._setup()
        self._initialized = True

    async def _setup(self) -> None:
        """Hook for subclasses needing asynchronous setup."""
        return None

    @abstractmethod
    async def get_catalog(self) -> RawCatalog:
        """Return raw ``rules``, ``categories`` and ``rulesets`` mappings."""

    def catalog_inputs(self) -> Any:
        """Return JSON-serialisable data, besides name and version, that shapes the catalog."""

        return self.config.settings

    def get_target_patterns(self, target: str) -> list[str]:
        """Return glob patterns (``!`` prefix for exclusions) for ``target``.

        Configured patterns take precedence over the engine defaults.
        """

        _ = target
        if self.config.target_patterns is not None:
            return list(self.config.target_patterns)
        return list(self.default_target_patterns)

    @abstractmethod
    async def run(
        self,
        groups: Sequence[RuleGroup],
        rules: Sequence[Rule],
        targets: Sequence[RuleTarget],
    ) -> list[Violation]:
        """Evaluate ``rules`` against ``targets`` and return the violations."""

    def warn(self, message: str) -> None:
        """Report a non-fatal problem through the event channel."""

        self.events.warn(self.name, message)

    def debug(self, message: str) -> None:
        self.events.debug(self.name, message)


def iter_target_files(targets: Sequence[RuleTarget]) -> Iterator[TargetFile]:
    """Yield each concrete file named by ``targets`` exactly once.

    Relative entries are joined to the target's ``root`` so engines read the
    same files the resolver matched, whatever the process working directory.
    Directory targets hold paths relative to the directory; a degraded
    directory target (``"."``) is walked in full.

    Args:
        targets: Resolved targets handed to an engine.

    Yields:
        TargetFile: Files in target order with their display paths.
    """

    seen: set[Path] = set()
    for target in targets:
        root = target.root or Path.cwd()
        base = root / Path(target.target).expanduser() if target.is_directory else root
        for entry in target.paths:
            for file_path in _expand(base / Path(entry).expanduser()):
                key = file_path.resolve()
                if key in seen:
                    continue
                seen.add(key)
                yield TargetFile(path=file_path, display=display_path(file_path, root))


def _expand(candidate: Path) -> Iterator[Path]:
    if candidate.is_file():
        yield candidate
        return
    if not candidate.is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(candidate):
        dirnames[:] = sorted(name for name in dirnames if name not in _SKIPPED_WALK_DIRS)
        current = Path(dirpath)
        for filename in sorted(filenames):
            yield current / filename


def display_path(path: Path, root: Path | None = None) -> str:
    """Return ``path`` relative to ``root`` (or the cwd) in POSIX form when possible."""

    base = root or Path.cwd()
    try:
        return path.resolve().relative_to(base.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


__all__ = [
    "EXTENSION_LANGUAGES",
    "RawCatalog",
    "RuleEngine",
    "TargetFile",
    "display_path",
    "iter_target_files",
    "language_for",
]
