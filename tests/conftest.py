"""Shared fixtures: throwaway Godot projects and fake Godot executables."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from godot_mcp.engine import GodotEngine
from godot_mcp.gateway import GodotGateway
from godot_mcp.operations import OperationRunner
from godot_mcp.session import SessionSupervisor


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A minimal Godot project directory."""
    root = tmp_path / "game"
    root.mkdir()
    (root / "project.godot").write_text(
        'config_version=5\n\n[application]\n\nconfig/name="Test Game"\n'
    )
    return root


@pytest.fixture
def make_godot(tmp_path: Path) -> Callable[..., str]:
    """Write an executable shell script standing in for the Godot binary."""

    def _make(body: str, name: str = "godot") -> str:
        path = tmp_path / "bin" / name
        path.parent.mkdir(exist_ok=True)
        path.write_text("#!/bin/sh\n" + textwrap.dedent(body))
        path.chmod(0o755)
        return str(path)

    return _make


@pytest.fixture
def make_gateway() -> Callable[[str], GodotGateway]:
    def _make(godot_path: str) -> GodotGateway:
        engine = GodotEngine(godot_path)
        return GodotGateway(engine, OperationRunner(engine), SessionSupervisor())

    return _make
