# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule engine contract and the built-in engines."""

from __future__ import annotations

from .base import RawCatalog, RuleEngine, iter_target_files
from .pyast import PythonAstEngine
from .regex import RegexEngine
from .registry import ENGINE_FACTORIES, EnginePluginsFactory

__all__ = [
    "ENGINE_FACTORIES",
    "EnginePluginsFactory",
    "PythonAstEngine",
    "RawCatalog",
    "RegexEngine",
    "RuleEngine",
    "iter_target_files",
]
