# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI command registry."""

from __future__ import annotations

import typer

from . import add_rules, config, rules, run

__all__ = ["register_commands"]


def register_commands(app: typer.Typer) -> None:
    """Register the built-in commands on ``app``."""

    app.command("run")(run.run_command)
    app.command("rules")(rules.rules_command)
    app.command("config")(config.config_command)
    app.command("add-rules")(add_rules.add_rules_command)
