# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the event channel and its listeners."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from scanhub.events import (
    CORE_SOURCE,
    CollectingListener,
    EventChannel,
    LogEventDisplayer,
    LogEventLogger,
    LogLevel,
)

FIXED = datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)


class RecordingWriter:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.closed = False

    def write_to_log(self, message: str) -> None:
        self.lines.append(message)

    def close_log(self) -> None:
        self.closed = True


def test_listening_attaches_for_the_block_only() -> None:
    channel = EventChannel()
    collector = CollectingListener()

    with channel.listening(collector):
        channel.warn("regex", "inside")
    channel.warn("regex", "outside")

    assert collector.messages() == ["inside"]


def test_emit_stamps_events_with_the_channel_clock() -> None:
    channel = EventChannel(clock=lambda: FIXED)
    collector = CollectingListener()
    channel.attach(collector)

    event = channel.error(CORE_SOURCE, "broken")

    assert event.timestamp == FIXED
    assert collector.events == [event]
    assert collector.messages(LogLevel.WARN) == []


def test_log_event_logger_formats_and_closes_writer() -> None:
    writer = RecordingWriter()
    channel = EventChannel(clock=lambda: FIXED)

    with channel.listening(LogEventLogger(writer)):
        channel.debug("pyast", "parsed 3 files")

    assert writer.lines == ["[2025-03-04T05:06:07+00:00] DEBUG pyast - parsed 3 files\n"]
    assert writer.closed is True


def test_displayer_hides_info_unless_verbose(capsys: pytest.CaptureFixture[str]) -> None:
    channel = EventChannel(clock=lambda: FIXED)

    with channel.listening(LogEventDisplayer(use_emoji=False, use_color=False)):
        channel.info(CORE_SOURCE, "quiet info")
        channel.warn("regex", "loud warning")
        channel.debug(CORE_SOURCE, "never shown")
    with channel.listening(LogEventDisplayer(use_emoji=False, use_color=False, verbose=True)):
        channel.info(CORE_SOURCE, "verbose info")

    output = capsys.readouterr().out
    assert "quiet info" not in output
    assert "never shown" not in output
    assert "Engine 'regex' [05:06:07]: loud warning" in output
    assert "scanhub [05:06:07]: verbose info" in output
