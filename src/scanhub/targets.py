# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Expansion of user targets into per-engine file lists."""

from __future__ import annotations

import asyncio
import os
import re
from collections.abc import Iterable, Iterator, Sequence
from functools import lru_cache
from pathlib import Path
from typing import Final

from .engines.base import RuleEngine
from .errors import TargetResolutionError
from .events import CORE_SOURCE, EventChannel
from .models import RuleTarget

_MAGIC_CHARS: Final[frozenset[str]] = frozenset("*?[{")
_SKIPPED_DIRS: Final[frozenset[str]] = frozenset({".git"})
DEGRADED_DIRECTORY_ENTRY: Final[str] = "."


def has_magic(target: str) -> bool:
    """Return ``True`` when ``target`` contains glob metacharacters."""

    return any(char in _MAGIC_CHARS for char in target)


def _translate(pattern: str) -> str:
    parts: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "*":
            if pattern.startswith("**", index):
                at_start = index == 0 or pattern[index - 1] == "/"
                after = index + 2
                if at_start and pattern.startswith("/", after):
                    parts.append("(?:.*/)?")
                    index = after + 1
                    continue
                if at_start and after == length and index > 0:
                    # ``dir/**`` also matches ``dir`` itself.
                    parts.pop()
                    parts.append("(?:/.*)?")
                    index = after
                    continue
                parts.append(".*")
                index = after
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = pattern.find("]", index + 2)
            if end == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[index + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append(f"[{body.replace(chr(92), chr(92) * 2)}]")
                index = end + 1
                continue
        elif char == "{":
            end = pattern.find("}", index)
            if end == -1:
                parts.append(re.escape(char))
            else:
                options = pattern[index + 1 : end].split(",")
                parts.append("(?:" + "|".join(_translate(option) for option in options) + ")")
                index = end + 1
                continue
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


@lru_cache(maxsize=512)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a glob into a regex matched against POSIX relative paths.

    ``**`` spans any number of path segments (including none), ``*`` and
    ``?`` stay within one segment, ``{a,b}`` alternates and ``[...]`` matches
    a character class (``[!...]`` negates it).

    Args:
        pattern: Glob pattern without a leading ``!``.

    Returns:
        re.Pattern[str]: Compiled, fully anchored expression.
    """

    normalized = pattern[2:] if pattern.startswith("./") else pattern
    return re.compile(rf"\A{_translate(normalized)}\Z")


def split_patterns(patterns: Iterable[str]) -> tuple[list[str], list[str]]:
    """Split ``patterns`` into inclusions and ``!``-prefixed exclusions."""

    includes: list[str] = []
    excludes: list[str] = []
    for pattern in patterns:
        if pattern.startswith("!"):
            excludes.append(pattern[1:])
        elif pattern:
            includes.append(pattern)
    return includes, excludes


def matches_patterns(path: str, patterns: Sequence[str]) -> bool:
    """Return whether ``path`` matches an inclusion and no exclusion pattern."""

    includes, excludes = split_patterns(patterns)
    candidate = path.replace("\\", "/")
    if candidate.startswith("./"):
        candidate = candidate[2:]
    if not any(compile_glob(pattern).match(candidate) for pattern in includes):
        return False
    return not any(compile_glob(pattern).match(candidate) for pattern in excludes)


def _walk_files(root: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in _SKIPPED_DIRS)
        current = Path(dirpath)
        for filename in sorted(filenames):
            yield current / filename


def _static_prefix(glob: str) -> str:
    segments: list[str] = []
    for segment in glob.split("/"):
        if has_magic(segment):
            break
        segments.append(segment)
    return "/".join(segments)


class TargetResolver:
    """Translate user targets into :class:`RuleTarget` values for one engine."""

    def __init__(self, events: EventChannel, cwd: Path | None = None) -> None:
        self._events = events
        self._cwd = cwd

    @property
    def cwd(self) -> Path:
        return self._cwd or Path.cwd()

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.cwd).as_posix()
        except ValueError:
            return path.as_posix()

    def resolve(self, engine: RuleEngine, target: str) -> RuleTarget | None:
        """Resolve ``target`` for ``engine``.

        Args:
            engine: Engine whose target patterns filter the expansion.
            target: Glob, directory or file supplied by the user.

        Returns:
            RuleTarget | None: ``None`` when the target is missing or nothing
            matched the engine's patterns.
        """

        patterns = engine.get_target_patterns(target)
        if not patterns:
            return self._resolve_degraded(engine, target)
        if has_magic(target):
            matched = [path for path in self._expand_glob(target) if matches_patterns(path, patterns)]
            return RuleTarget(target=target, root=self.cwd, paths=tuple(matched)) if matched else None
        path = self._absolute(target)
        if path.is_dir():
            entries = [
                candidate.relative_to(path).as_posix()
                for candidate in _walk_files(path)
                if matches_patterns(candidate.relative_to(path).as_posix(), patterns)
            ]
            if not entries:
                return None
            return RuleTarget(target=target, root=self.cwd, paths=tuple(entries), is_directory=True)
        if path.is_file():
            relative = self._relative(path) if path.is_absolute() else target
            if matches_patterns(relative, patterns):
                return RuleTarget(target=target, root=self.cwd, paths=(target,))
        return None

    async def resolve_all(self, engine: RuleEngine, targets: Sequence[str]) -> list[RuleTarget]:
        """Resolve every target for ``engine`` off the event loop, dropping empty ones."""

        resolved: list[RuleTarget] = []
        for target in targets:
            result = await asyncio.to_thread(self.resolve, engine, target)
            if result is not None:
                resolved.append(result)
        return resolved

    def _absolute(self, target: str) -> Path:
        path = Path(target).expanduser()
        return path if path.is_absolute() else self.cwd / path

    def _expand_glob(self, glob: str) -> list[str]:
        normalized = glob[2:] if glob.startswith("./") else glob
        prefix = _static_prefix(normalized)
        root = self._absolute(prefix) if prefix else self.cwd
        if not root.is_dir():
            return []
        compiled = compile_glob(normalized)
        absolute = Path(normalized).is_absolute()
        results: list[str] = []
        for path in _walk_files(root):
            shown = path.as_posix() if absolute else self._relative(path)
            if compiled.match(shown):
                results.append(shown)
        return results

    def _resolve_degraded(self, engine: RuleEngine, target: str) -> RuleTarget | None:
        self._events.warn(
            CORE_SOURCE,
            f"engine '{engine.get_name()}' declares no target patterns; passing '{target}' through unfiltered",
        )
        if has_magic(target):
            matched = self._expand_glob(target)
            if not matched:
                return None
            return RuleTarget(target=target, root=self.cwd, paths=tuple(matched), degraded=True)
        path = self._absolute(target)
        if path.is_dir():
            return RuleTarget(
                target=target,
                root=self.cwd,
                paths=(DEGRADED_DIRECTORY_ENTRY,),
                is_directory=True,
                degraded=True,
            )
        if path.exists():
            return RuleTarget(target=target, root=self.cwd, paths=(target,), degraded=True)
        return None


def validate_explicit_targets(targets: Iterable[str], cwd: Path | None = None) -> None:
    """Raise for a directly named (non-glob) target that does not exist.

    Raises:
        TargetResolutionError: For the first missing target.
    """

    base = cwd or Path.cwd()
    for target in targets:
        if has_magic(target):
            continue
        path = Path(target).expanduser()
        if not path.is_absolute():
            path = base / path
        if not path.exists():
            raise TargetResolutionError(target)


__all__ = [
    "DEGRADED_DIRECTORY_ENTRY",
    "TargetResolver",
    "compile_glob",
    "has_magic",
    "matches_patterns",
    "split_patterns",
    "validate_explicit_targets",
]
