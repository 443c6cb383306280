# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for glob matching and target resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from scanhub.errors import TargetResolutionError
from scanhub.events import CollectingListener, EventChannel, LogLevel
from scanhub.targets import TargetResolver, compile_glob, has_magic, matches_patterns, validate_explicit_targets
from tests.stubs import engine_a

CLS_PATTERNS = ("**/*.cls", "!**/node_modules/**")


def _touch(root: Path, relative: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("// source\n", encoding="utf-8")


@pytest.mark.parametrize(
    ("pattern", "path", "expected"),
    [
        ("**/*.cls", "A.cls", True),
        ("**/*.cls", "src/deep/A.cls", True),
        ("src/*.cls", "src/deep/A.cls", False),
        ("src/?.cls", "src/A.cls", True),
        ("**/node_modules/**", "src/node_modules/B.cls", True),
        ("**/node_modules/**", "node_modules", True),
        ("*.{js,ts}", "app.ts", True),
        ("*.{js,ts}", "app.py", False),
        ("[ab].py", "b.py", True),
        ("[!ab].py", "b.py", False),
    ],
)
def test_compile_glob(pattern: str, path: str, expected: bool) -> None:
    assert bool(compile_glob(pattern).match(path)) is expected


def test_matches_patterns_applies_exclusions() -> None:
    assert matches_patterns("src/A.cls", CLS_PATTERNS)
    assert not matches_patterns("src/node_modules/B.cls", CLS_PATTERNS)
    assert not matches_patterns("src/A.js", CLS_PATTERNS)


def test_has_magic() -> None:
    assert has_magic("src/**/*.cls")
    assert has_magic("file{1,2}.txt")
    assert not has_magic("src/A.cls")


def test_glob_target_excludes_node_modules(tmp_path: Path, events: EventChannel) -> None:
    _touch(tmp_path, "src/A.cls")
    _touch(tmp_path, "src/node_modules/B.cls")
    resolver = TargetResolver(events, tmp_path)

    target = resolver.resolve(engine_a(patterns=CLS_PATTERNS), "src/**/*.cls")

    assert target is not None
    assert list(target.paths) == ["src/A.cls"]
    assert target.is_directory is False


def test_directory_target_holds_relative_paths(tmp_path: Path, events: EventChannel) -> None:
    _touch(tmp_path, "src/A.cls")
    _touch(tmp_path, "src/lib/C.cls")
    _touch(tmp_path, "src/readme.md")
    resolver = TargetResolver(events, tmp_path)

    target = resolver.resolve(engine_a(patterns=CLS_PATTERNS), "src")

    assert target is not None
    assert target.is_directory is True
    assert list(target.paths) == ["A.cls", "lib/C.cls"]


def test_file_target_outside_patterns_is_dropped(tmp_path: Path, events: EventChannel) -> None:
    _touch(tmp_path, "src/readme.md")
    _touch(tmp_path, "src/A.cls")
    resolver = TargetResolver(events, tmp_path)
    engine = engine_a(patterns=CLS_PATTERNS)

    assert resolver.resolve(engine, "src/readme.md") is None
    kept = resolver.resolve(engine, "src/A.cls")
    assert kept is not None and kept.paths == ("src/A.cls",)


def test_missing_target_is_dropped_silently(tmp_path: Path, events: EventChannel, collector: CollectingListener) -> None:
    resolver = TargetResolver(events, tmp_path)

    assert resolver.resolve(engine_a(patterns=CLS_PATTERNS), "nope") is None
    assert collector.events == []


def test_engine_without_patterns_runs_degraded(
    tmp_path: Path, events: EventChannel, collector: CollectingListener
) -> None:
    _touch(tmp_path, "src/A.cls")
    resolver = TargetResolver(events, tmp_path)

    target = resolver.resolve(engine_a(patterns=()), "src")

    assert target is not None
    assert target.degraded is True
    assert target.paths == (".",)
    assert any("no target patterns" in message for message in collector.messages(LogLevel.WARN))


def test_validate_explicit_targets(tmp_path: Path) -> None:
    _touch(tmp_path, "src/A.cls")

    validate_explicit_targets(["src", "src/A.cls", "missing/**/*.cls"], tmp_path)
    with pytest.raises(TargetResolutionError, match="missing.cls"):
        validate_explicit_targets(["src", "missing.cls"], tmp_path)
