# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""The ``run`` action: select, dispatch, recombine, write and report."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from ..config import ScannerConfig
from ..constants import RECOMMENDED_TAG
from ..context import ScannerContext
from ..custom_paths import CustomRulePathManager
from ..engines.registry import EnginePluginsFactory
from ..errors import ConfigurationError
from ..events import EventChannel
from ..formats import OutputFormat
from ..logging import fail, info, ok, plain
from ..models import RecombinedRuleResults
from ..selectors import SelectorToken, normalize_selectors
from ..severity import SeverityLevel, severity_display
from ..targets import validate_explicit_targets
from ..viewers import ViewMode, results_viewer_for
from ..writers import CompositeResultsWriter

THRESHOLD_EXIT_CODE = 4


@dataclass(frozen=True, slots=True)
class RunOptions:
    """User choices for one ``run`` invocation."""

    workspace: tuple[str, ...] = (".",)
    targets: tuple[str, ...] = ()
    rule_selector: tuple[str, ...] = (RECOMMENDED_TAG,)
    severity_threshold: SeverityLevel | None = None
    view: ViewMode | None = None
    output_files: tuple[str, ...] = ()
    fmt: OutputFormat | None = None
    use_color: bool | None = None
    use_emoji: bool = True

    @property
    def effective_targets(self) -> tuple[str, ...]:
        return self.targets or self.workspace

    @property
    def effective_view(self) -> ViewMode | None:
        """Return the console view; table unless results only go to files or stdout text."""

        if self.view is not None:
            return self.view
        if self.output_files or (self.fmt is not None and self.fmt is not OutputFormat.TABLE):
            return None
        return ViewMode.TABLE


@dataclass(frozen=True, slots=True)
class RunOutcome:
    results: RecombinedRuleResults
    exit_code: int = 0
    engines: list[str] = field(default_factory=list)


def validate_run_options(options: RunOptions, *, cwd: Path | None = None) -> CompositeResultsWriter:
    """Reject inconsistent options before any engine is created.

    Returns:
        CompositeResultsWriter: Writer for the requested output files.

    Raises:
        ConfigurationError: For malformed selectors or unusable output files.
        TargetResolutionError: For a named target that does not exist.
    """

    if options.fmt is OutputFormat.TABLE and options.output_files:
        raise ConfigurationError("table format cannot be written to a file; choose a file-based format")
    writer = CompositeResultsWriter.from_files(options.output_files, options.fmt)
    for token in normalize_selectors(options.rule_selector):
        SelectorToken.parse(token)
    validate_explicit_targets(options.effective_targets, cwd)
    return writer


async def run_scan(
    options: RunOptions,
    *,
    config: ScannerConfig,
    events: EventChannel,
    factory: EnginePluginsFactory | None = None,
    custom_paths: CustomRulePathManager | None = None,
    catalog_file: Path | None = None,
    cwd: Path | None = None,
) -> RunOutcome:
    """Execute a scan and emit every requested output.

    Args:
        options: User choices.
        config: Effective configuration.
        events: Channel receiving progress and warnings.
        factory: Engine factory override.
        custom_paths: Custom rule registry override.
        catalog_file: Catalog cache override.
        cwd: Directory targets are resolved against.

    Returns:
        RunOutcome: Results plus the exit code implied by the severity threshold.
    """

    writer = validate_run_options(options, cwd=cwd)
    context = await ScannerContext.create(
        config,
        events,
        factory=factory,
        custom_paths=custom_paths,
        catalog_file=catalog_file,
        cwd=cwd,
    )
    selection = context.selector.select(
        context.catalog.catalog.rules, options.rule_selector, context.engine_names
    )
    groups = context.catalog.get_rule_groups_matching_filters(())
    violations = await context.dispatcher.dispatch(selection, groups, options.effective_targets)
    engines = list(context.dispatcher.dispatched_engines)
    console_format = options.fmt or OutputFormat.TABLE
    results = context.recombinator.recombine(violations, console_format, engines=engines)

    writer.write(results)
    if not options.output_files and isinstance(results.results, str):
        plain(results.results.rstrip("\n"), use_color=options.use_color)
    view = options.effective_view
    results_viewer_for(view, use_color=options.use_color).view(results)
    report_run_summary(results, engines, options, show_summary=view is not None or bool(options.output_files))

    exit_code = 0
    threshold = options.severity_threshold
    if threshold is not None and results.min_sev != 0 and results.min_sev <= int(threshold):
        fail(
            f"Violations at or above severity threshold {severity_display(int(threshold))} were found.",
            use_emoji=options.use_emoji,
            use_color=options.use_color,
        )
        exit_code = THRESHOLD_EXIT_CODE
    return RunOutcome(results=results, exit_code=exit_code, engines=engines)


def report_run_summary(
    results: RecombinedRuleResults,
    engines: Sequence[str],
    options: RunOptions,
    *,
    show_summary: bool,
) -> None:
    """Print the per-engine summary or the no-violations message."""

    names = ", ".join(engines) or "none"
    if not results.has_violations():
        ok(
            f"Executed engines: {names}. No rule violations found.",
            use_emoji=options.use_emoji,
            use_color=options.use_color,
        )
        return
    if not show_summary:
        return
    for engine, summary in results.summary_map.items():
        info(
            f"Executed {engine}, found {summary.violation_count} violation(s) across {summary.file_count} file(s).",
            use_emoji=options.use_emoji,
            use_color=options.use_color,
        )
    for file in options.output_files:
        info(f"Results written to {file}.", use_emoji=options.use_emoji, use_color=options.use_color)


__all__ = [
    "RunOptions",
    "RunOutcome",
    "THRESHOLD_EXIT_CODE",
    "report_run_summary",
    "run_scan",
    "validate_run_options",
]
