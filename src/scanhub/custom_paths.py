# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Registry of user-supplied custom rule files, keyed by engine and language."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final

from .constants import custom_paths_path
from .errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

REGEX_ENGINE: Final[str] = "regex"

# Extensions each engine accepts as custom rule definition files.
ENGINE_RULE_EXTENSIONS: Final[dict[str, frozenset[str]]] = {
    REGEX_ENGINE: frozenset({".yml", ".yaml", ".json"}),
}

RulePathMap = dict[str, dict[str, list[str]]]


class CustomRulePathManager:
    """Load, extend and persist the custom rule path registry.

    Use :meth:`open` to obtain a handle whose registry has already been read.
    """

    def __init__(self, path: Path, entries: RulePathMap) -> None:
        self._path = path
        self._entries = entries

    @classmethod
    def open(cls, path: Path | None = None) -> CustomRulePathManager:
        """Read the registry file and return a ready manager.

        A missing or blank file is treated as an empty registry.

        Args:
            path: Registry location; defaults to the scanner home file.

        Returns:
            CustomRulePathManager: Manager holding the parsed registry.

        Raises:
            ConfigurationError: If the file exists but cannot be read or parsed.
        """

        location = path or custom_paths_path()
        try:
            data = location.read_text(encoding="utf-8")
        except FileNotFoundError:
            LOGGER.debug("custom rule path file %s does not exist yet", location)
            data = ""
        except OSError as exc:
            raise ConfigurationError(f"failed to read custom rule path file '{location}': {exc}") from exc
        if not data.strip():
            return cls(location, {})
        try:
            raw = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"custom rule path file '{location}' is not valid JSON: {exc}") from exc
        return cls(location, _coerce_entries(raw, location))

    @property
    def path(self) -> Path:
        return self._path

    def get_rule_path_entries(self, engine: str) -> dict[str, list[str]]:
        """Return a copy of the ``language -> paths`` map registered for ``engine``."""

        return {language: list(paths) for language, paths in self._entries.get(engine, {}).items()}

    def add_paths_for_language(self, language: str, paths: Sequence[str | Path]) -> list[str]:
        """Register rule files for ``language`` and persist the registry.

        Directories are searched one level deep. Files whose extension no
        engine accepts are ignored.

        Args:
            language: Language the rules apply to.
            paths: Files or directories supplied by the user.

        Returns:
            list[str]: Absolute paths that were registered.

        Raises:
            ConfigurationError: If a path does not exist or the registry cannot be written.
        """

        added: list[str] = []
        for entry in self._expand_paths(paths):
            engine = determine_engine_for_path(entry)
            if engine is None:
                continue
            bucket = self._entries.setdefault(engine, {}).setdefault(language, [])
            as_text = entry.as_posix()
            if as_text not in bucket:
                bucket.append(as_text)
            added.append(as_text)
        self._save()
        return added

    def _expand_paths(self, paths: Sequence[str | Path]) -> list[Path]:
        expanded: list[Path] = []
        for raw in paths:
            candidate = Path(raw).expanduser()
            if not candidate.exists():
                raise ConfigurationError(f"custom rule path '{raw}' does not exist")
            if candidate.is_file():
                expanded.append(candidate.resolve())
                continue
            expanded.extend(sorted(child.resolve() for child in candidate.iterdir() if child.is_file()))
        return expanded

    def _save(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(self._entries, indent=4, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"failed to write custom rule path file '{self._path}': {exc}") from exc


def determine_engine_for_path(path: Path) -> str | None:
    """Return the engine that consumes rule definitions stored at ``path``."""

    suffix = path.suffix.lower()
    for engine, extensions in ENGINE_RULE_EXTENSIONS.items():
        if suffix in extensions:
            return engine
    return None


def _coerce_entries(raw: object, location: Path) -> RulePathMap:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"custom rule path file '{location}' must contain a JSON object")
    entries: RulePathMap = {}
    for engine, languages in raw.items():
        if not isinstance(languages, Mapping):
            raise ConfigurationError(f"custom rule path entry for '{engine}' must be an object")
        entries[str(engine)] = {
            str(language): [str(item) for item in values] for language, values in languages.items()
        }
    return entries


__all__ = [
    "CustomRulePathManager",
    "ENGINE_RULE_EXTENSIONS",
    "REGEX_ENGINE",
    "determine_engine_for_path",
]
