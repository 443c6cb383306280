# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""The ``config`` action: materialise the effective configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..config import ScannerConfig
from ..constants import ALL_SELECTOR
from ..context import ScannerContext
from ..custom_paths import CustomRulePathManager
from ..engines.registry import EnginePluginsFactory
from ..events import CORE_SOURCE, EventChannel
from ..viewers import ConfigViewer
from ..writers import ConfigFileWriter, ConfirmOverwrite


@dataclass(frozen=True, slots=True)
class ConfigOptions:
    rule_selector: tuple[str, ...] = (ALL_SELECTOR,)
    output_file: str | None = None
    include_unmodified_rules: bool = False
    use_color: bool | None = None


async def show_config(
    options: ConfigOptions,
    *,
    config: ScannerConfig,
    events: EventChannel,
    confirm: ConfirmOverwrite,
    factory: EnginePluginsFactory | None = None,
    custom_paths: CustomRulePathManager | None = None,
    catalog_file: Path | None = None,
) -> str:
    """Render the effective configuration, display it and optionally save it.

    Args:
        options: User choices.
        config: Configuration loaded for this invocation.
        events: Channel receiving progress messages.
        confirm: Callback approving the overwrite of an existing output file.
        factory: Engine factory override.
        custom_paths: Custom rule registry override.
        catalog_file: Catalog cache override.

    Returns:
        str: The YAML document.
    """

    writer = ConfigFileWriter.from_file(options.output_file, confirm) if options.output_file else None
    context = await ScannerContext.create(
        config,
        events,
        factory=factory,
        custom_paths=custom_paths,
        catalog_file=catalog_file,
    )
    selection = context.selector.select(context.catalog.catalog.rules, options.rule_selector, context.engine_names)
    document = config.to_yaml(rules=selection.rules, include_unmodified=options.include_unmodified_rules)
    ConfigViewer(use_color=options.use_color).view(document)
    if writer is not None:
        if writer.write(document):
            events.info(CORE_SOURCE, f"configuration written to {writer.file}")
        else:
            events.warn(CORE_SOURCE, f"left existing {writer.file} unchanged")
    return document


__all__ = ["ConfigOptions", "show_config"]
