# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typed event channel used to surface non-fatal conditions to listeners."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Protocol, runtime_checkable

from .logging import fail, info, warn

CORE_SOURCE = "scanhub"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current UTC time."""
    return datetime.now(timezone.utc)


class LogLevel(IntEnum):
    """Event verbosity; lower values are more important."""

    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4
    FINE = 5


@dataclass(frozen=True, slots=True)
class LogEvent:
    """One message emitted by the core or by an engine."""

    source: str
    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=utc_now)


@runtime_checkable
class EventListener(Protocol):
    """Receiver attached to an :class:`EventChannel`."""

    def handle(self, event: LogEvent) -> None:
        """Consume ``event``."""

    def close(self) -> None:
        """Release any resources once the listener is detached."""


class EventChannel:
    """Explicit fan-out of :class:`LogEvent` objects to attached listeners.

    Components that report non-fatal issues receive a channel through their
    constructor; nothing is registered globally.
    """

    def __init__(self, *, clock: Clock = utc_now) -> None:
        self._listeners: list[EventListener] = []
        self._clock = clock

    def attach(self, listener: EventListener) -> None:
        """Start delivering events to ``listener``."""

        self._listeners.append(listener)

    def detach(self, listener: EventListener) -> None:
        """Stop delivering events to ``listener`` and let it clean up."""

        if listener in self._listeners:
            self._listeners.remove(listener)
            listener.close()

    @contextmanager
    def listening(self, *listeners: EventListener) -> Iterator[EventChannel]:
        """Attach ``listeners`` for the duration of the ``with`` block.

        Args:
            *listeners: Listeners that should observe events emitted in the block.

        Yields:
            EventChannel: The channel itself, for convenience.
        """

        for listener in listeners:
            self.attach(listener)
        try:
            yield self
        finally:
            for listener in reversed(listeners):
                self.detach(listener)

    def emit(self, source: str, level: LogLevel, message: str) -> LogEvent:
        """Build a :class:`LogEvent` and deliver it to every listener.

        Args:
            source: ``scanhub`` for core events, otherwise the engine name.
            level: Severity of the event.
            message: Human-readable message.

        Returns:
            LogEvent: The event that was delivered.
        """

        event = LogEvent(source=source, level=level, message=message, timestamp=self._clock())
        for listener in tuple(self._listeners):
            listener.handle(event)
        return event

    def error(self, source: str, message: str) -> LogEvent:
        return self.emit(source, LogLevel.ERROR, message)

    def warn(self, source: str, message: str) -> LogEvent:
        return self.emit(source, LogLevel.WARN, message)

    def info(self, source: str, message: str) -> LogEvent:
        return self.emit(source, LogLevel.INFO, message)

    def debug(self, source: str, message: str) -> LogEvent:
        return self.emit(source, LogLevel.DEBUG, message)


class CollectingListener:
    """Keep every received event in memory; used by actions and tests."""

    def __init__(self) -> None:
        self.events: list[LogEvent] = []

    def handle(self, event: LogEvent) -> None:
        self.events.append(event)

    def close(self) -> None:
        return None

    def messages(self, level: LogLevel | None = None) -> list[str]:
        """Return collected messages, optionally restricted to ``level``."""

        return [event.message for event in self.events if level is None or event.level == level]


class LogEventDisplayer:
    """Print events at INFO or above to the console."""

    def __init__(self, *, use_emoji: bool = True, use_color: bool | None = None, verbose: bool = False) -> None:
        """Configure presentation preferences.

        Args:
            use_emoji: Flag indicating whether emoji prefixes are printed.
            use_color: Optional explicit colour flag overriding TTY detection.
            verbose: When ``False`` INFO events from the core are suppressed.
        """

        self._use_emoji = use_emoji
        self._use_color = use_color
        self._verbose = verbose

    def handle(self, event: LogEvent) -> None:
        if event.level > LogLevel.INFO:
            return
        source = "scanhub" if event.source == CORE_SOURCE else f"Engine '{event.source}'"
        formatted = f"{source} [{event.timestamp:%H:%M:%S}]: {event.message}"
        if event.level == LogLevel.ERROR:
            fail(formatted, use_emoji=self._use_emoji, use_color=self._use_color)
        elif event.level == LogLevel.WARN:
            warn(formatted, use_emoji=self._use_emoji, use_color=self._use_color)
        elif self._verbose:
            info(formatted, use_emoji=self._use_emoji, use_color=self._use_color)

    def close(self) -> None:
        return None


class LogWriter(Protocol):
    """Destination for formatted log lines."""

    def write_to_log(self, message: str) -> None: ...

    def close_log(self) -> None: ...


class LogEventLogger:
    """Write every event to a :class:`LogWriter`."""

    def __init__(self, writer: LogWriter) -> None:
        self._writer = writer

    def handle(self, event: LogEvent) -> None:
        self._writer.write_to_log(
            f"[{event.timestamp.isoformat()}] {event.level.name} {event.source} - {event.message}\n"
        )

    def close(self) -> None:
        self._writer.close_log()


__all__ = [
    "CORE_SOURCE",
    "Clock",
    "CollectingListener",
    "EventChannel",
    "EventListener",
    "LogEvent",
    "LogEventDisplayer",
    "LogEventLogger",
    "LogLevel",
    "LogWriter",
    "utc_now",
]
