# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``scanhub config``: show or export the effective configuration."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from ...actions.config import ConfigOptions, show_config
from ...constants import ALL_SELECTOR
from ..shared import cli_session


def _confirm_overwrite(path: Path) -> bool:
    return typer.confirm(f"{path} already exists. Overwrite it?", default=False)


def config_command(
    rule_selector: list[str] | None = typer.Option(
        None,
        "--rule-selector",
        "-r",
        help=f"Rules whose settings are included (default: {ALL_SELECTOR}).",
    ),
    output_file: Path | None = typer.Option(None, "--output-file", "-f", help="Write the YAML to this file."),
    include_unmodified_rules: bool = typer.Option(
        False,
        "--include-unmodified-rules",
        help="Also list rules without configured overrides.",
    ),
    config_file: Path | None = typer.Option(None, "--config-file", "-c", help="scanhub YAML configuration."),
    verbose: bool = typer.Option(False, "--verbose", help="Show informational events."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable ANSI colour output."),
    no_emoji: bool = typer.Option(False, "--no-emoji", help="Disable emoji output."),
) -> None:
    """Print the effective configuration as YAML."""

    options = ConfigOptions(
        rule_selector=tuple(rule_selector or (ALL_SELECTOR,)),
        output_file=str(output_file) if output_file is not None else None,
        include_unmodified_rules=include_unmodified_rules,
        use_color=False if no_color else None,
    )
    with cli_session(config_file=config_file, verbose=verbose, no_emoji=no_emoji, no_color=no_color) as session:
        asyncio.run(
            show_config(options, config=session.config, events=session.events, confirm=_confirm_overwrite)
        )


__all__ = ["config_command"]
