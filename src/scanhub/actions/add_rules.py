# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""The ``add-rules`` action: register custom rule files."""

from __future__ import annotations

from dataclasses import dataclass

from ..custom_paths import CustomRulePathManager
from ..errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class AddRulesOptions:
    language: str
    paths: tuple[str, ...]


def add_rules(options: AddRulesOptions, registry: CustomRulePathManager) -> list[str]:
    """Register ``options.paths`` for ``options.language``.

    Returns:
        list[str]: Files that were registered.

    Raises:
        ConfigurationError: If the language is blank, no path was given, or no
            supplied file can hold custom rules.
    """

    language = options.language.strip()
    if not language:
        raise ConfigurationError("a language is required")
    if not options.paths:
        raise ConfigurationError("at least one path is required")
    added = registry.add_paths_for_language(language, options.paths)
    if not added:
        raise ConfigurationError("none of the supplied paths contain custom rule files (.yml, .yaml or .json)")
    return added


__all__ = ["AddRulesOptions", "add_rules"]
