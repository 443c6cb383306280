# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``scanhub add-rules``: register custom rule files."""

from __future__ import annotations

import typer

from ...actions.add_rules import AddRulesOptions, add_rules
from ...custom_paths import CustomRulePathManager
from ..shared import build_cli_logger, handle_scanner_errors


def add_rules_command(
    language: str = typer.Option(..., "--language", "-l", help="Language the rules apply to."),
    path: list[str] = typer.Option(..., "--path", "-p", help="Rule file or directory; repeatable."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable ANSI colour output."),
    no_emoji: bool = typer.Option(False, "--no-emoji", help="Disable emoji output."),
) -> None:
    """Register custom rule definitions for a language."""

    logger = build_cli_logger(no_emoji=no_emoji, no_color=no_color)
    with handle_scanner_errors(logger):
        registry = CustomRulePathManager.open()
        added = add_rules(AddRulesOptions(language=language, paths=tuple(path)), registry)
    logger.ok(f"Registered {len(added)} rule file(s) for {language} in {registry.path}.")
    for entry in added:
        typer.echo(f"  {entry}")


__all__ = ["add_rules_command"]
