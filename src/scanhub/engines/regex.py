# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Line-oriented regular-expression rules for text files."""

from __future__ import annotations

import asyncio
import hashlib
import json
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..config import EngineConfig
from ..constants import RECOMMENDED_TAG
from ..custom_paths import REGEX_ENGINE, CustomRulePathManager
from ..errors import ConfigurationError, first_validation_error
from ..events import EventChannel
from ..models import Rule, RuleGroup, RuleTarget, Violation
from ..severity import parse_severity
from .base import RawCatalog, RuleEngine, TargetFile, iter_target_files, language_for

DEFAULT_MAX_LINE_LENGTH: Final[int] = 120
CUSTOM_TAG: Final[str] = "Custom"
QUICKSTART_RULESET: Final[str] = "quickstart"

_TEXT_LANGUAGES: Final[tuple[str, ...]] = (
    "python",
    "javascript",
    "typescript",
    "java",
    "apex",
    "markdown",
    "yaml",
    "json",
    "text",
)


@dataclass(frozen=True, slots=True)
class RegexRule:
    """Compiled definition backing one regex engine rule."""

    name: str
    pattern: re.Pattern[str]
    message: str
    severity: int
    description: str
    languages: tuple[str, ...] = _TEXT_LANGUAGES
    categories: tuple[str, ...] = ()
    rulesets: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    default_enabled: bool = True
    resource_url: str | None = None

    def to_raw(self) -> dict[str, Any]:
        """Return the raw catalog entry describing this rule."""

        return {
            "name": self.name,
            "engine": REGEX_ENGINE,
            "severity": self.severity,
            "tags": list(self.tags),
            "categories": list(self.categories),
            "rulesets": list(self.rulesets),
            "languages": list(self.languages),
            "description": self.description,
            "resource_urls": [self.resource_url] if self.resource_url else [],
            "default_enabled": self.default_enabled,
        }


class CustomRuleEntry(BaseModel):
    """One entry of a user-registered custom rule file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(min_length=1)
    regex: str = Field(min_length=1)
    severity: int = Field(default=3, ge=1, le=5)
    message: str = ""
    description: str = ""
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    default_enabled: bool = False
    url: str | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return int(parse_severity(value))
            except ConfigurationError as exc:
                raise ValueError(str(exc)) from exc
        return value


def _builtin_rules(max_line_length: int) -> list[RegexRule]:
    return [
        RegexRule(
            name="NoTrailingWhitespace",
            pattern=re.compile(r"[ \t]+$"),
            message="Line ends with trailing whitespace.",
            severity=4,
            description="Flags lines that end with spaces or tabs.",
            categories=("Code Style",),
            rulesets=(QUICKSTART_RULESET,),
            tags=(RECOMMENDED_TAG, "CodeStyle"),
        ),
        RegexRule(
            name="NoTabIndentation",
            pattern=re.compile(r"^\t+"),
            message="Line is indented with tabs.",
            severity=5,
            description="Flags lines whose indentation uses tab characters.",
            categories=("Code Style",),
            tags=("CodeStyle",),
            default_enabled=False,
        ),
        RegexRule(
            name="NoTodoComments",
            pattern=re.compile(r"\b(?:TODO|FIXME|XXX)\b"),
            message="Unresolved TODO marker.",
            severity=5,
            description="Flags TODO, FIXME and XXX markers left in source.",
            categories=("Best Practices",),
            tags=("BestPractices",),
            default_enabled=False,
        ),
        RegexRule(
            name="NoHardcodedSecrets",
            pattern=re.compile(
                r"""(?i)\b(?:password|passwd|secret|api[_-]?key|access[_-]?token)\b\s*[:=]\s*["'][^"'\s]{4,}["']"""
            ),
            message="Possible hard-coded credential.",
            severity=1,
            description="Flags string literals assigned to credential-like names.",
            categories=("Security",),
            rulesets=(QUICKSTART_RULESET,),
            tags=(RECOMMENDED_TAG, "Security"),
        ),
        RegexRule(
            name="AvoidOverlongLines",
            pattern=re.compile(rf"^.{{{max_line_length + 1},}}$"),
            message=f"Line exceeds {max_line_length} characters.",
            severity=4,
            description=f"Flags lines longer than {max_line_length} characters.",
            categories=("Code Style",),
            tags=("CodeStyle",),
            default_enabled=False,
        ),
    ]


class RegexEngine(RuleEngine):
    """Evaluate regular-expression rules line by line."""

    name = REGEX_ENGINE
    version = "1.2.0"
    default_target_patterns = (
        "**/*.py",
        "**/*.js",
        "**/*.mjs",
        "**/*.ts",
        "**/*.java",
        "**/*.cls",
        "**/*.trigger",
        "**/*.md",
        "**/*.yml",
        "**/*.yaml",
        "**/*.json",
        "**/*.txt",
        "!**/node_modules/**",
        "!**/.git/**",
    )

    def __init__(
        self,
        *,
        config: EngineConfig | None = None,
        events: EventChannel | None = None,
        custom_paths: CustomRulePathManager | None = None,
    ) -> None:
        super().__init__(config=config, events=events)
        self._custom_paths = custom_paths
        self._rules: dict[str, RegexRule] = {}

    @property
    def max_line_length(self) -> int:
        value = self.config.settings.get("max_line_length", DEFAULT_MAX_LINE_LENGTH)
        try:
            return max(1, int(value))
        except (TypeError, ValueError):
            self.warn(f"ignoring invalid max_line_length '{value}'")
            return DEFAULT_MAX_LINE_LENGTH

    def catalog_inputs(self) -> Any:
        custom = self._custom_paths.get_rule_path_entries(REGEX_ENGINE) if self._custom_paths else {}
        digests = {path: _file_digest(Path(path)) for paths in custom.values() for path in paths}
        return {"settings": self.config.settings, "custom_paths": custom, "custom_digests": digests}

    async def _setup(self) -> None:
        rules = _builtin_rules(self.max_line_length)
        if self._custom_paths is not None:
            entries = self._custom_paths.get_rule_path_entries(REGEX_ENGINE)
            rules.extend(await asyncio.to_thread(self._load_custom_rules, entries))
        for rule in rules:
            if rule.name in self._rules:
                self.warn(f"duplicate rule '{rule.name}' ignored")
                continue
            self._rules[rule.name] = rule

    async def get_catalog(self) -> RawCatalog:
        await self.init()
        rules = [rule.to_raw() for rule in self._rules.values()]
        categories = _groups(self._rules.values(), lambda rule: rule.categories)
        rulesets = _groups(self._rules.values(), lambda rule: rule.rulesets)
        return {"rules": rules, "categories": categories, "rulesets": rulesets}

    async def run(
        self,
        groups: Sequence[RuleGroup],
        rules: Sequence[Rule],
        targets: Sequence[RuleTarget],
    ) -> list[Violation]:
        await self.init()
        _ = groups
        active = [(rule, self._rules[rule.name]) for rule in rules if rule.name in self._rules]
        if not active:
            return []
        violations: list[Violation] = []
        for item in iter_target_files(targets):
            violations.extend(await asyncio.to_thread(self._scan_file, item, active))
        return violations

    def _scan_file(self, item: TargetFile, active: Sequence[tuple[Rule, RegexRule]]) -> list[Violation]:
        path = item.path
        language = language_for(path) or "text"
        applicable = [pair for pair in active if language in pair[1].languages]
        if not applicable:
            return []
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            self.debug(f"skipping non-text file {path}")
            return []
        except OSError as exc:
            self.warn(f"unable to read {path}: {exc}")
            return []
        found: list[Violation] = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            for rule, definition in applicable:
                match = definition.pattern.search(line)
                if match is None:
                    continue
                found.append(
                    Violation(
                        rule=rule.name,
                        engine=self.name,
                        severity=rule.severity,
                        file=item.display,
                        message=definition.message,
                        line=line_number,
                        column=match.start() + 1,
                        end_line=line_number,
                        end_column=match.end() + 1,
                        category=rule.categories[0] if rule.categories else None,
                        resource_url=rule.resource_urls[0] if rule.resource_urls else None,
                    )
                )
        return found

    def _load_custom_rules(self, entries: Mapping[str, Sequence[str]]) -> list[RegexRule]:
        loaded: list[RegexRule] = []
        for language, paths in entries.items():
            for raw_path in paths:
                loaded.extend(self._read_rule_file(Path(raw_path), language))
        return loaded

    def _read_rule_file(self, path: Path, language: str) -> list[RegexRule]:
        try:
            text = path.read_text(encoding="utf-8")
            data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
            self.events.error(self.name, f"unable to load custom rules from {path}: {exc}")
            return []
        if isinstance(data, Mapping):
            data = data.get("rules", [])
        if not isinstance(data, list):
            self.events.error(self.name, f"custom rule file {path} must contain a list of rules")
            return []
        rules: list[RegexRule] = []
        for entry in data:
            rule = self._custom_rule(entry, language, path)
            if rule is not None:
                rules.append(rule)
        return rules

    def _custom_rule(self, entry: object, language: str, source: Path) -> RegexRule | None:
        try:
            spec = CustomRuleEntry.model_validate(entry)
        except ValidationError as exc:
            name = entry.get("name", "<unnamed>") if isinstance(entry, Mapping) else "<unnamed>"
            self.events.error(self.name, f"rejected custom rule '{name}' in {source}: {first_validation_error(exc)}")
            return None
        try:
            pattern = re.compile(spec.regex)
        except re.error as exc:
            self.events.error(self.name, f"custom rule '{spec.name}' has an invalid regex: {exc}")
            return None
        return RegexRule(
            name=spec.name,
            pattern=pattern,
            message=spec.message or spec.description or f"Matched custom rule {spec.name}.",
            severity=spec.severity,
            description=spec.description,
            languages=(language,),
            categories=spec.categories,
            tags=(CUSTOM_TAG, *spec.tags),
            default_enabled=spec.default_enabled,
            resource_url=spec.url or None,
        )


def _file_digest(path: Path) -> str:
    try:
        return hashlib.sha256(path.read_bytes()).hexdigest()
    except OSError:
        return "missing"


def _groups(
    rules: Iterable[RegexRule], attribute: Callable[[RegexRule], tuple[str, ...]]
) -> list[dict[str, Any]]:
    names: list[str] = []
    for rule in rules:
        for name in attribute(rule):
            if name not in names:
                names.append(name)
    return [{"name": name, "engine": REGEX_ENGINE, "paths": []} for name in names]


__all__ = ["CUSTOM_TAG", "DEFAULT_MAX_LINE_LENGTH", "RegexEngine", "RegexRule"]
