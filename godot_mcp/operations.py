"""Runs scene operations through the bundled ``godot_operations.gd`` script.

Each call writes its parameters to a throwaway JSON file, runs Godot headless
against the fixed script, deletes the file, and parses the single
``GODOT_MCP_RESULT`` line the script prints last. Nothing is spliced into
GDScript source.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import Any

from godot_mcp.engine import GodotEngine
from godot_mcp.errors import EngineInvocationFailed, EngineReportedFailure, GENERIC_HINTS
from godot_mcp.utils import error_lines

logger = logging.getLogger(__name__)

SCRIPT_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "scripts", "godot_operations.gd")

RESULT_TAG = "GODOT_MCP_RESULT"

OPERATIONS = ("create_scene", "add_node", "load_sprite", "export_mesh_library", "save_scene")

# Mirrors NODE_TYPES in godot_operations.gd.
NODE_TYPES: frozenset[str] = frozenset({
    "Node", "Node2D", "Node3D", "Control", "CanvasLayer", "Timer",
    "AnimationPlayer", "AnimationTree", "AudioStreamPlayer", "HTTPRequest", "SubViewport",
    # 2D
    "Sprite2D", "AnimatedSprite2D", "Camera2D", "CharacterBody2D", "RigidBody2D",
    "StaticBody2D", "Area2D", "CollisionShape2D", "CollisionPolygon2D", "TileMap",
    "Marker2D", "Path2D", "PathFollow2D", "Line2D", "Polygon2D", "PointLight2D",
    "DirectionalLight2D", "GPUParticles2D", "CPUParticles2D", "RayCast2D",
    "AudioStreamPlayer2D", "NavigationAgent2D", "VisibleOnScreenNotifier2D",
    "ParallaxBackground", "ParallaxLayer",
    # 3D
    "Sprite3D", "AnimatedSprite3D", "Camera3D", "CharacterBody3D", "RigidBody3D",
    "StaticBody3D", "Area3D", "CollisionShape3D", "MeshInstance3D",
    "DirectionalLight3D", "OmniLight3D", "SpotLight3D", "Marker3D", "RayCast3D",
    "GPUParticles3D", "WorldEnvironment", "AudioStreamPlayer3D", "NavigationAgent3D",
    "GridMap",
    # UI
    "Label", "Button", "TextureButton", "TextureRect", "NinePatchRect", "ColorRect",
    "Panel", "PanelContainer", "VBoxContainer", "HBoxContainer", "GridContainer",
    "MarginContainer", "CenterContainer", "ScrollContainer", "LineEdit", "TextEdit",
    "RichTextLabel", "ProgressBar", "CheckBox", "OptionButton", "HSlider", "VSlider",
})

ROOT_NODE_TYPES = ("Node2D", "Node3D", "Control", "Node")
DEFAULT_ROOT_NODE_TYPE = "Node2D"

SPRITE_NODE_TYPES = ("Sprite2D", "Sprite3D", "TextureRect")

# Error codes the script reports, with hints shown to the caller.
FAILURE_HINTS: dict[str, list[str]] = {
    "load_failed": ["Verify the scene file is a valid PackedScene", "Ensure the scene path is relative to the project"],
    "node_not_found": ["Ensure the node path exists (e.g. 'root' or 'root/Player')"],
    "unsupported_node_type": ["Use a built-in Godot node class name (e.g. Node2D, Sprite2D)"],
    "incompatible_node": ["Ensure the node is a Sprite2D, Sprite3D, or TextureRect"],
    "texture_load_failed": ["Verify the texture file is a valid image format", "Ensure Godot has imported the texture"],
    "pack_failed": ["Verify the scene can be properly packed"],
    "save_failed": ["Ensure you have write permissions to the output path"],
    "dir_failed": ["Ensure you have write permissions to the output directory"],
    "no_meshes": ["Check if the scene contains valid 3D meshes", "Check the meshItemNames filter"],
    "invalid_params": ["This is a bug in godot-mcp; please report it"],
    "unknown_operation": ["This is a bug in godot-mcp; please report it"],
}


@dataclass
class OperationResult:
    status: str
    code: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def to_resource_path(path: str) -> str:
    """Turn a project-relative path into a ``res://`` path."""
    if path.startswith("res://"):
        return path
    return "res://" + path.replace("\\", "/").lstrip("/")


def parse_result_line(stdout: str) -> OperationResult | None:
    """Decode the last ``GODOT_MCP_RESULT`` line of *stdout*, if any."""
    for line in reversed(stdout.splitlines()):
        stripped = line.strip()
        if not stripped.startswith(RESULT_TAG):
            continue
        try:
            payload = json.loads(stripped[len(RESULT_TAG):].strip())
        except json.JSONDecodeError:
            logger.debug("Malformed result line: %s", stripped)
            return None
        if not isinstance(payload, dict) or payload.get("status") not in ("ok", "error"):
            return None
        data = payload.get("data")
        return OperationResult(
            status=payload["status"],
            code=str(payload.get("code", "")),
            message=str(payload.get("message", "")),
            data=data if isinstance(data, dict) else {},
        )
    return None


def strip_result_line(stdout: str) -> str:
    """Return *stdout* without the machine-readable result line."""
    return "\n".join(l for l in stdout.splitlines() if not l.strip().startswith(RESULT_TAG)).strip()


class OperationRunner:
    """Invokes Godot headless against the fixed operations script."""

    def __init__(self, engine: GodotEngine, script_path: str = SCRIPT_PATH) -> None:
        self.engine = engine
        self.script_path = script_path

    def build_args(self, operation: str, project_path: str, params_path: str) -> list[str]:
        return [
            "--headless",
            "--path", project_path,
            "--script", self.script_path,
            "--", operation, params_path,
        ]

    async def run(self, operation: str, project_path: str, params: dict[str, Any]) -> OperationResult:
        """Run *operation* and return its parsed outcome.

        Raises EngineInvocationFailed when Godot cannot run or produces no
        result line, and EngineReportedFailure when the script reports an
        error.
        """
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}")

        fd, params_path = tempfile.mkstemp(prefix="godot_mcp_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(params, f)
            logger.debug("Running %s with params %s", operation, params)
            out = await self.engine.run(self.build_args(operation, project_path, params_path))
        finally:
            try:
                os.remove(params_path)
            except OSError as e:
                logger.warning("Could not remove params file %s: %s", params_path, e)

        result = parse_result_line(out.stdout)
        if result is None:
            detail = error_lines(out.stderr + "\n" + out.stdout)
            message = f"Godot produced no result for {operation} (exit code {out.returncode})"
            if detail:
                message += ":\n" + "\n".join(detail)
            raise EngineInvocationFailed(message, GENERIC_HINTS)

        result.stdout = strip_result_line(out.stdout)
        result.stderr = out.stderr
        if not result.ok:
            raise EngineReportedFailure(result.message, result.code, FAILURE_HINTS.get(result.code))
        return result
