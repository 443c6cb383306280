# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JSON results with a per-engine summary."""

from __future__ import annotations

import json
from collections.abc import Sequence

from ..models import Violation
from .base import SummaryMap


def format_json(violations: Sequence[Violation], summary: SummaryMap) -> str:
    payload = {
        "summary": {engine: entry.model_dump() for engine, entry in summary.items()},
        "violations": [violation.model_dump(mode="json") for violation in violations],
    }
    return json.dumps(payload, indent=2, sort_keys=True) + "\n"


__all__ = ["format_json"]
