# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command implementations independent of the CLI layer."""

from __future__ import annotations

from .add_rules import AddRulesOptions, add_rules
from .config import ConfigOptions, show_config
from .rules import RulesOptions, list_rules
from .run import RunOptions, RunOutcome, run_scan

__all__ = [
    "AddRulesOptions",
    "ConfigOptions",
    "RulesOptions",
    "RunOptions",
    "RunOutcome",
    "add_rules",
    "list_rules",
    "run_scan",
    "show_config",
]
