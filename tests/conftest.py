# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from scanhub.console import reset_consoles
from scanhub.constants import CATALOG_FILE_ENV, CUSTOM_PATH_FILE_ENV, SCANNER_HOME_ENV
from scanhub.events import CollectingListener, EventChannel


@pytest.fixture(autouse=True)
def scanner_home(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the scanner home at a throwaway directory for every test."""

    home = tmp_path_factory.mktemp("scanhub-home")
    monkeypatch.setenv(SCANNER_HOME_ENV, str(home))
    monkeypatch.delenv(CATALOG_FILE_ENV, raising=False)
    monkeypatch.delenv(CUSTOM_PATH_FILE_ENV, raising=False)
    reset_consoles()
    yield home
    reset_consoles()


@pytest.fixture
def collector() -> CollectingListener:
    return CollectingListener()


@pytest.fixture
def events(collector: CollectingListener) -> EventChannel:
    """Return a channel with ``collector`` attached."""

    channel = EventChannel()
    channel.attach(collector)
    return channel
