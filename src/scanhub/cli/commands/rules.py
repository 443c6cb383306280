# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``scanhub rules``: list the rules a selector resolves to."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from ...actions.rules import RulesOptions, list_rules
from ...viewers import ViewMode
from ...writers import split_output_files
from ..shared import cli_session


def rules_command(
    rule_selector: list[str] | None = typer.Option(
        None,
        "--rule-selector",
        "-r",
        help="Selector tokens (default: Recommended, or all when filters are given).",
    ),
    category: list[str] | None = typer.Option(None, "--category", help="Only rules in these categories."),
    ruleset: list[str] | None = typer.Option(None, "--ruleset", help="Only rules in these rulesets."),
    language: list[str] | None = typer.Option(None, "--language", help="Only rules for these languages."),
    engine: list[str] | None = typer.Option(None, "--engine", help="Only rules from these engines."),
    view: ViewMode | None = typer.Option(None, "--view", "-v", help="Console view of the rules."),
    output_file: list[str] | None = typer.Option(
        None,
        "--output-file",
        "-f",
        help="Write the rules to .json or .csv file(s).",
    ),
    config_file: Path | None = typer.Option(None, "--config-file", "-c", help="scanhub YAML configuration."),
    verbose: bool = typer.Option(False, "--verbose", help="Show informational events."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable ANSI colour output."),
    no_emoji: bool = typer.Option(False, "--no-emoji", help="Disable emoji output."),
) -> None:
    """Describe the rules selected by the given selector and filters."""

    options = RulesOptions(
        rule_selector=tuple(rule_selector or ()),
        categories=tuple(category or ()),
        rulesets=tuple(ruleset or ()),
        languages=tuple(language or ()),
        engines=tuple(engine or ()),
        view=view,
        output_files=tuple(split_output_files(output_file)),
        use_color=False if no_color else None,
    )
    with cli_session(config_file=config_file, verbose=verbose, no_emoji=no_emoji, no_color=no_color) as session:
        asyncio.run(list_rules(options, config=session.config, events=session.events))


__all__ = ["rules_command"]
