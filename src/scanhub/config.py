# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders for the scanhub orchestrator."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import CONFIG_FILE_NAMES, scanner_home
from .errors import ConfigurationError
from .models import Rule
from .severity import parse_severity


class EngineConfig(BaseModel):
    """Per-engine switches and target patterns."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    disabled: bool = False
    target_patterns: list[str] | None = None
    settings: dict[str, Any] = Field(default_factory=dict)


class RuleOverride(BaseModel):
    """User adjustments applied to a single catalog rule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    severity: int | None = None
    tags: tuple[str, ...] | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: object) -> object:
        """Accept severity names (``high``) as well as numbers."""
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, (int, str)):
            return int(parse_severity(value))
        return value


def _default_log_folder() -> Path:
    return scanner_home() / "logs"


class ScannerConfig(BaseModel):
    """Effective configuration for one scanhub invocation."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    config_root: Path = Field(default_factory=Path.cwd)
    log_folder: Path = Field(default_factory=_default_log_folder)
    engines: dict[str, EngineConfig] = Field(default_factory=dict)
    rules: dict[str, dict[str, RuleOverride]] = Field(default_factory=dict)

    def engine_config(self, name: str) -> EngineConfig:
        """Return the configuration for engine ``name`` (defaults when absent)."""

        return self.engines.get(name) or EngineConfig()

    def is_engine_enabled(self, name: str) -> bool:
        """Return ``True`` unless engine ``name`` is explicitly disabled."""

        return not self.engine_config(name).disabled

    def rule_override(self, engine: str, rule: str) -> RuleOverride | None:
        """Return the override for ``rule`` of ``engine``, if one is configured."""

        return self.rules.get(engine, {}).get(rule)

    def to_yaml(self, *, rules: Sequence[Rule] = (), include_unmodified: bool = False) -> str:
        """Serialise the effective configuration as YAML.

        Args:
            rules: Rules whose settings belong in the ``rules`` section. Their
                severity and tags already reflect configured overrides.
            include_unmodified: Emit every rule in ``rules``; otherwise only
                rules with a configured override are listed.

        Returns:
            str: YAML document that :func:`load_config` accepts.
        """

        engines = {
            name: engine.model_dump(exclude_defaults=True) for name, engine in self.engines.items()
        }
        rule_section: dict[str, dict[str, dict[str, Any]]] = {}
        for rule in rules:
            if not include_unmodified and self.rule_override(rule.engine, rule.name) is None:
                continue
            rule_section.setdefault(rule.engine, {})[rule.name] = {
                "severity": rule.severity,
                "tags": list(rule.tags),
            }
        document: dict[str, Any] = {
            "config_root": self.config_root.as_posix(),
            "log_folder": self.log_folder.as_posix(),
            "engines": engines,
            "rules": rule_section,
        }
        return dump_yaml(document)


def find_config_file(root: Path) -> Path | None:
    """Return the first conventional config file found directly under ``root``."""

    for name in CONFIG_FILE_NAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None, *, root: Path | None = None) -> ScannerConfig:
    """Load and validate the scanhub configuration.

    Args:
        path: Explicit configuration file; when ``None`` the conventional names
            are searched under ``root``.
        root: Directory used for discovery and relative paths. Defaults to the
            current working directory.

    Returns:
        ScannerConfig: Validated configuration (defaults when no file exists).

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid.
    """

    base = (root or Path.cwd()).resolve()
    source = path if path is not None else find_config_file(base)
    if source is None:
        return ScannerConfig(config_root=base)
    if not source.is_file():
        raise ConfigurationError(f"config file '{source}' does not exist")
    try:
        raw = yaml.safe_load(source.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"config file '{source}' is not valid YAML: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"config file '{source}' must contain a mapping at the top level")
    payload = dict(raw)
    config_root = Path(payload.pop("config_root", source.parent)).expanduser()
    if not config_root.is_absolute():
        config_root = (source.parent / config_root).resolve()
    log_folder = payload.get("log_folder")
    if log_folder is not None and not Path(str(log_folder)).expanduser().is_absolute():
        payload["log_folder"] = config_root / str(log_folder)
    try:
        return ScannerConfig(config_root=config_root, **payload)
    except (ValidationError, ConfigurationError) as exc:
        raise ConfigurationError(f"config file '{source}' is invalid: {exc}") from exc


def dump_yaml(data: Mapping[str, Any]) -> str:
    """Serialise ``data`` as block-style YAML preserving key order."""

    return yaml.safe_dump(dict(data), sort_keys=False, default_flow_style=False, allow_unicode=True)


__all__ = [
    "EngineConfig",
    "RuleOverride",
    "ScannerConfig",
    "dump_yaml",
    "find_config_file",
    "load_config",
]
