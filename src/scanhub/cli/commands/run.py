# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``scanhub run``: execute the selected rules against the workspace."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from ...actions.run import RunOptions, run_scan
from ...constants import RECOMMENDED_TAG
from ...errors import ConfigurationError
from ...formats import RESULT_FORMATS, OutputFormat
from ...severity import SeverityLevel, parse_severity
from ...viewers import ViewMode
from ...writers import split_output_files
from ..shared import bad_parameter, cli_session


def _parse_threshold(value: str | None) -> SeverityLevel | None:
    if value is None:
        return None
    try:
        return parse_severity(value)
    except ConfigurationError as exc:
        raise bad_parameter(exc) from exc


def _validate_cli_combinations(view: ViewMode | None, output_format: OutputFormat | None) -> None:
    """Reject flag combinations that can never produce sensible output.

    Raises:
        typer.BadParameter: If an invalid combination is supplied.
    """

    if output_format is not None and output_format not in RESULT_FORMATS:
        raise typer.BadParameter(f"'{output_format.value}' is not a results format.")
    if view is not None and output_format is not None and output_format is not OutputFormat.TABLE:
        raise typer.BadParameter("--view cannot be combined with a non-table --format.")


def run_command(
    workspace: list[str] | None = typer.Option(
        None,
        "--workspace",
        "-w",
        help="Files, directories or globs making up the workspace (default: current directory).",
    ),
    target: list[str] | None = typer.Option(
        None,
        "--target",
        "-t",
        help="Subset of the workspace to scan (default: the whole workspace).",
    ),
    rule_selector: list[str] | None = typer.Option(
        None,
        "--rule-selector",
        "-r",
        help=f"Selector tokens; join terms with ':' (default: {RECOMMENDED_TAG}).",
    ),
    severity_threshold: str | None = typer.Option(
        None,
        "--severity-threshold",
        "-s",
        help="Exit non-zero when a violation at this severity (1-5 or name) or worse is found.",
    ),
    view: ViewMode | None = typer.Option(None, "--view", "-v", help="Console view of the results."),
    output_file: list[str] | None = typer.Option(
        None,
        "--output-file",
        "-f",
        help="Write results to file(s); format follows the extension. Repeatable or comma-delimited.",
    ),
    output_format: OutputFormat | None = typer.Option(None, "--format", help="Explicit results format."),
    config_file: Path | None = typer.Option(None, "--config-file", "-c", help="scanhub YAML configuration."),
    verbose: bool = typer.Option(False, "--verbose", help="Show informational events."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable ANSI colour output."),
    no_emoji: bool = typer.Option(False, "--no-emoji", help="Disable emoji output."),
) -> None:
    """Run the selected rules and report their violations."""

    _validate_cli_combinations(view, output_format)
    options = RunOptions(
        workspace=tuple(workspace or (".",)),
        targets=tuple(target or ()),
        rule_selector=tuple(rule_selector or (RECOMMENDED_TAG,)),
        severity_threshold=_parse_threshold(severity_threshold),
        view=view,
        output_files=tuple(split_output_files(output_file)),
        fmt=output_format,
        use_color=False if no_color else None,
        use_emoji=not no_emoji,
    )
    with cli_session(config_file=config_file, verbose=verbose, no_emoji=no_emoji, no_color=no_color) as session:
        outcome = asyncio.run(run_scan(options, config=session.config, events=session.events))
    if outcome.exit_code:
        raise typer.Exit(code=outcome.exit_code)


__all__ = ["run_command"]
