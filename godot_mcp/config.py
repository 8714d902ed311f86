"""Environment-driven configuration and logging setup.

stdout carries the MCP stdio transport, so every log record goes to stderr.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping

logger = logging.getLogger(__name__)

_TRUTHY = ("true", "1", "yes")


@dataclass(frozen=True)
class ServerConfig:
    """Settings read once at startup."""

    godot_path: str | None = None
    debug: bool = False
    # None means synchronous engine calls wait for as long as the engine runs.
    operation_timeout: float | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerConfig":
        env = os.environ if environ is None else environ
        return cls(
            godot_path=env.get("GODOT_PATH") or None,
            debug=env.get("DEBUG", "").strip().lower() in _TRUTHY,
            operation_timeout=_parse_timeout(env.get("GODOT_MCP_TIMEOUT", "")),
        )


def _parse_timeout(raw: str) -> float | None:
    raw = raw.strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric GODOT_MCP_TIMEOUT=%r", raw)
        return None
    if value <= 0:
        logger.warning("Ignoring non-positive GODOT_MCP_TIMEOUT=%r", raw)
        return None
    return value


def setup_logging(debug: bool = False) -> None:
    """Attach a single stderr handler to the ``godot_mcp`` logger tree."""
    root = logging.getLogger("godot_mcp")
    root.setLevel(logging.DEBUG if debug else logging.WARNING)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    root.addHandler(handler)
    root.propagate = False
