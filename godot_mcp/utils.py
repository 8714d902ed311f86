"""Shared helpers for the tool modules."""

from __future__ import annotations

import json
from typing import Any


# Lowercased fragments that mark a line of Godot console output as an error.
ERROR_MARKERS = ("error", "exception", "failed", "script error", "node not found")


def error_lines(output: str, limit: int = 10) -> list[str]:
    """Return the last *limit* distinct error lines of *output*, in order.

    Used to explain a script run that ended without a result line.
    """
    seen: set[str] = set()
    found: list[str] = []
    for line in output.splitlines():
        stripped = line.strip()
        if stripped in seen or not any(m in stripped.lower() for m in ERROR_MARKERS):
            continue
        seen.add(stripped)
        found.append(stripped)
    return found[-limit:]


def to_json(data: Any) -> str:
    """Pretty-print a tool payload the way every JSON tool result is sent."""
    return json.dumps(data, indent=2)
