# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the run, rules and config actions wired with stub engines."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest
import yaml

from scanhub.actions import ConfigOptions, RulesOptions, RunOptions, list_rules, run_scan, show_config
from scanhub.actions.run import THRESHOLD_EXIT_CODE
from scanhub.config import EngineConfig, ScannerConfig
from scanhub.custom_paths import CustomRulePathManager
from scanhub.engines import EnginePluginsFactory
from scanhub.errors import ConfigurationError, TargetResolutionError
from scanhub.events import EventChannel
from scanhub.formats import OutputFormat
from scanhub.severity import SeverityLevel
from tests.stubs import StubEngine, engine_a, engine_b, make_violation


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "A.cls").write_text("// a\n", encoding="utf-8")
    return root


@pytest.fixture
def created() -> list[StubEngine]:
    return []


@pytest.fixture
def factory(created: list[StubEngine]) -> EnginePluginsFactory:
    def _a(config: EngineConfig, events: EventChannel, _paths: CustomRulePathManager | None) -> StubEngine:
        engine = engine_a(
            config=config,
            events=events,
            violations=[make_violation("A", "A1", "src/A.cls", 4, severity=2)],
        )
        created.append(engine)
        return engine

    def _b(config: EngineConfig, events: EventChannel, _paths: CustomRulePathManager | None) -> StubEngine:
        engine = engine_b(config=config, events=events)
        created.append(engine)
        return engine

    return EnginePluginsFactory({"A": _a, "B": _b})


@pytest.fixture
def registry(tmp_path: Path) -> CustomRulePathManager:
    return CustomRulePathManager.open(tmp_path / "paths.json")


def test_run_scan_writes_files_and_applies_threshold(
    workspace: Path, factory: EnginePluginsFactory, registry: CustomRulePathManager, events: EventChannel
) -> None:
    out = workspace / "out" / "results.json"
    options = RunOptions(
        workspace=("src",),
        severity_threshold=SeverityLevel.HIGH,
        output_files=(str(out),),
        use_color=False,
        use_emoji=False,
    )

    outcome = asyncio.run(
        run_scan(options, config=ScannerConfig(), events=events, factory=factory, custom_paths=registry, cwd=workspace)
    )

    assert outcome.exit_code == THRESHOLD_EXIT_CODE
    assert outcome.engines == ["A", "B"]
    assert outcome.results.min_sev == 2
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert [item["rule"] for item in payload["violations"]] == ["A1"]
    assert payload["summary"]["B"] == {"file_count": 0, "violation_count": 0}


def test_run_scan_below_threshold_exits_cleanly(
    workspace: Path, factory: EnginePluginsFactory, registry: CustomRulePathManager, events: EventChannel
) -> None:
    options = RunOptions(workspace=("src",), severity_threshold=SeverityLevel.CRITICAL, use_color=False)

    outcome = asyncio.run(
        run_scan(options, config=ScannerConfig(), events=events, factory=factory, custom_paths=registry, cwd=workspace)
    )

    assert outcome.exit_code == 0
    assert outcome.results.format is OutputFormat.TABLE


@pytest.mark.parametrize("target", ["src", "src/**/*.py", "src/bad.py"])
def test_run_scan_resolves_targets_against_the_given_directory(
    target: str,
    workspace: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    registry: CustomRulePathManager,
    events: EventChannel,
) -> None:
    (workspace / "src" / "bad.py").write_text("try:\n    pass\nexcept:\n    pass\n", encoding="utf-8")
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)
    options = RunOptions(targets=(target,), rule_selector=("pyast:BareExcept",), use_color=False, use_emoji=False)

    outcome = asyncio.run(
        run_scan(options, config=ScannerConfig(), events=events, custom_paths=registry, cwd=workspace)
    )

    results = outcome.results
    assert results.summary_map["pyast"].violation_count == 1
    assert [(item.file, item.line) for item in results.violations] == [("src/bad.py", 3)]


def test_run_scan_rejects_bad_input_before_engines_exist(
    workspace: Path,
    factory: EnginePluginsFactory,
    registry: CustomRulePathManager,
    events: EventChannel,
    created: list[StubEngine],
) -> None:
    missing = RunOptions(workspace=("does-not-exist",))
    table_file = RunOptions(fmt=OutputFormat.TABLE, output_files=(str(workspace / "out.json"),))

    with pytest.raises(TargetResolutionError):
        asyncio.run(
            run_scan(missing, config=ScannerConfig(), events=events, factory=factory, custom_paths=registry, cwd=workspace)
        )
    with pytest.raises(ConfigurationError, match="table format"):
        asyncio.run(
            run_scan(
                table_file, config=ScannerConfig(), events=events, factory=factory, custom_paths=registry, cwd=workspace
            )
        )

    assert created == []
    assert not (workspace / "out.json").exists()


def test_list_rules_defaults_to_recommended(
    factory: EnginePluginsFactory, registry: CustomRulePathManager, events: EventChannel
) -> None:
    selection = asyncio.run(
        list_rules(RulesOptions(use_color=False), config=ScannerConfig(), events=events, factory=factory, custom_paths=registry)
    )

    assert "BOptIn" not in {rule.name for rule in selection}
    assert len(selection) == 8


def test_list_rules_filters_imply_all_and_write_files(
    tmp_path: Path, factory: EnginePluginsFactory, registry: CustomRulePathManager, events: EventChannel
) -> None:
    out = tmp_path / "rules.json"
    options = RulesOptions(engines=("B",), output_files=(str(out),))

    selection = asyncio.run(
        list_rules(options, config=ScannerConfig(), events=events, factory=factory, custom_paths=registry)
    )

    names = [rule.name for rule in selection]
    assert names == ["B1", "B2", "B3", "BOptIn"]
    assert [item["name"] for item in json.loads(out.read_text(encoding="utf-8"))] == names


def test_show_config_honours_declined_overwrite(
    tmp_path: Path, factory: EnginePluginsFactory, registry: CustomRulePathManager, events: EventChannel
) -> None:
    target = tmp_path / "scanhub.yml"
    target.write_text("keep: me\n", encoding="utf-8")
    config = ScannerConfig(config_root=tmp_path, rules={"A": {"A2": {"severity": 1}}})

    document = asyncio.run(
        show_config(
            ConfigOptions(output_file=str(target), use_color=False),
            config=config,
            events=events,
            confirm=lambda path: False,
            factory=factory,
            custom_paths=registry,
        )
    )

    assert target.read_text(encoding="utf-8") == "keep: me\n"
    assert yaml.safe_load(document)["rules"] == {"A": {"A2": {"severity": 1, "tags": ["Recommended"]}}}
