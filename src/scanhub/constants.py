# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem locations and environment variable names shared by scanhub."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

SCANNER_HOME_ENV: Final[str] = "SCANHUB_HOME"
CATALOG_FILE_ENV: Final[str] = "SCANHUB_CATALOG_FILE"
CUSTOM_PATH_FILE_ENV: Final[str] = "SCANHUB_CUSTOM_PATH_FILE"
THREAD_COUNT_ENV: Final[str] = "SCANHUB_THREAD_COUNT"
THREAD_TIMEOUT_ENV: Final[str] = "SCANHUB_THREAD_TIMEOUT"

DEFAULT_SCANNER_DIR_NAME: Final[str] = ".scanhub"
CATALOG_FILE: Final[str] = "Catalog.json"
CUSTOM_PATHS_FILE: Final[str] = "CustomPaths.json"
CONFIG_FILE_NAMES: Final[tuple[str, ...]] = ("scanhub.yml", "scanhub.yaml")
LOG_FILE_PREFIX: Final[str] = "scanhub"

RECOMMENDED_TAG: Final[str] = "Recommended"
ALL_SELECTOR: Final[str] = "all"


def scanner_home() -> Path:
    """Return the per-user directory holding scanhub caches and registries.

    Returns:
        Path: Directory named by ``SCANHUB_HOME`` when set, otherwise
        ``~/.scanhub``.
    """

    override = os.environ.get(SCANNER_HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / DEFAULT_SCANNER_DIR_NAME


def catalog_path() -> Path:
    """Return the catalog cache location honouring ``SCANHUB_CATALOG_FILE``."""

    return scanner_home() / (os.environ.get(CATALOG_FILE_ENV) or CATALOG_FILE)


def custom_paths_path() -> Path:
    """Return the custom rule registry location honouring ``SCANHUB_CUSTOM_PATH_FILE``."""

    return scanner_home() / (os.environ.get(CUSTOM_PATH_FILE_ENV) or CUSTOM_PATHS_FILE)


__all__ = [
    "ALL_SELECTOR",
    "CATALOG_FILE",
    "CATALOG_FILE_ENV",
    "CONFIG_FILE_NAMES",
    "CUSTOM_PATHS_FILE",
    "CUSTOM_PATH_FILE_ENV",
    "LOG_FILE_PREFIX",
    "RECOMMENDED_TAG",
    "SCANNER_HOME_ENV",
    "THREAD_COUNT_ENV",
    "THREAD_TIMEOUT_ENV",
    "catalog_path",
    "custom_paths_path",
    "scanner_home",
]
