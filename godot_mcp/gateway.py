"""Tool gateway: validation and dispatch for every Godot tool.

Each handler takes the raw argument mapping of one tool call and returns the
text payload of a successful result. Failures are raised as ``GodotMCPError``
subclasses, which FastMCP reports as error results. Validation always runs
in the same order (required keys, path safety, project marker, referenced
files), so rejected calls never reach the engine.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Awaitable, Callable, Mapping

from godot_mcp.engine import GodotEngine
from godot_mcp.errors import (
    EngineInvocationFailed,
    FileNotFound,
    GENERIC_HINTS,
    GodotMCPError,
    UnknownTool,
    UnsupportedNodeType,
)
from godot_mcp.operations import (
    DEFAULT_ROOT_NODE_TYPE,
    NODE_TYPES,
    ROOT_NODE_TYPES,
    OperationRunner,
    to_resource_path,
)
from godot_mcp.projects import find_projects, project_structure, read_project_name
from godot_mcp.session import SessionSupervisor
from godot_mcp.utils import to_json
from godot_mcp.validation import project_file, require, require_file, require_project, validate_path

logger = logging.getLogger(__name__)

TOOL_NAMES = (
    "launch_editor",
    "run_project",
    "get_debug_output",
    "stop_project",
    "get_godot_version",
    "list_projects",
    "get_project_info",
    "create_scene",
    "add_node",
    "load_sprite",
    "export_mesh_library",
    "save_scene",
)

_SCENE_MISSING_HINTS = ["Ensure the scene path is correct", "Use create_scene to create a new scene first"]

# Remediation hints per tool, shown ahead of the generic ones when a tool
# fails with an unexpected OS error.
TOOL_HINTS: dict[str, list[str]] = {
    "launch_editor": ["Check that a display is available to open the editor"],
    "run_project": ["Ensure the main scene is set in project.godot or pass a scene"],
    "get_debug_output": [],
    "stop_project": [],
    "get_godot_version": [],
    "list_projects": ["Ensure the directory is readable"],
    "get_project_info": ["Ensure project.godot is readable"],
    "create_scene": [
        "Check if the root node type is valid",
        "Ensure you have write permissions to the scene path",
    ],
    "add_node": [
        "Check if the node type is valid",
        "Ensure the parent node path exists",
        "Verify the scene file is valid",
    ],
    "load_sprite": [
        "Check if the node path is correct",
        "Ensure the node is a Sprite2D, Sprite3D, or TextureRect",
        "Verify the texture file is a valid image format",
    ],
    "export_mesh_library": [
        "Check if the scene contains valid 3D meshes",
        "Ensure the output path is writable",
    ],
    "save_scene": [
        "Check if the scene file is valid",
        "Ensure you have write permissions to the output path",
    ],
}

Args = Mapping[str, Any]


class GodotGateway:
    """Routes tool calls to handlers; owns the session supervisor."""

    def __init__(self, engine: GodotEngine, runner: OperationRunner, supervisor: SessionSupervisor) -> None:
        self.engine = engine
        self.runner = runner
        self.supervisor = supervisor
        self._handlers: dict[str, Callable[[Args], Awaitable[str]]] = {
            name: getattr(self, name) for name in TOOL_NAMES
        }

    async def dispatch(self, name: str, args: Args | None = None) -> str:
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownTool(name)
        logger.debug("Handling tool request: %s", name)
        try:
            return await handler(args or {})
        except GodotMCPError:
            raise
        except OSError as e:
            logger.debug("%s failed", name, exc_info=True)
            raise EngineInvocationFailed(
                f"Failed to {name.replace('_', ' ')}: {e}", TOOL_HINTS[name] + GENERIC_HINTS,
            ) from e

    # --- Run control ---

    async def launch_editor(self, args: Args) -> str:
        require(args, "projectPath")
        project = require_project(args["projectPath"])
        process = await self.engine.launch_editor(project)
        logger.debug("Launched Godot editor for project %s (pid %s)", project, process.pid)
        return f"Godot editor launched successfully for project at {project}."

    async def run_project(self, args: Args) -> str:
        require(args, "projectPath")
        project = require_project(args["projectPath"])
        scene = args.get("scene") or None
        if scene is not None:
            validate_path(scene, "scene path")
        await self.supervisor.terminate()
        process = await self.engine.spawn_debug(project, scene)
        logger.debug("Running Godot project %s (pid %s)", project, process.pid)
        await self.supervisor.start(process)
        return "Godot project started in debug mode. Use get_debug_output to see output."

    async def get_debug_output(self, args: Args) -> str:
        return to_json(self.supervisor.snapshot())

    async def stop_project(self, args: Args) -> str:
        return to_json(await self.supervisor.stop())

    # --- Queries ---

    async def get_godot_version(self, args: Args) -> str:
        logger.debug("Getting Godot version")
        return await self.engine.version()

    async def list_projects(self, args: Args) -> str:
        require(args, "directory")
        directory = validate_path(args["directory"], "directory path")
        if not os.path.isdir(directory):
            raise FileNotFound("Directory", directory, ["Provide a valid directory path that exists on the system"])
        logger.debug("Listing Godot projects in directory: %s", directory)
        return to_json(find_projects(directory, recursive=args.get("recursive") is True))

    async def get_project_info(self, args: Args) -> str:
        require(args, "projectPath")
        project = require_project(args["projectPath"])
        logger.debug("Getting project info for: %s", project)
        version = await self.engine.query(["--path", project, "--version"])
        return to_json({
            "name": read_project_name(project),
            "path": project,
            "engineVersion": version,
            "structure": project_structure(project),
        })

    # --- Scene operations ---

    async def create_scene(self, args: Args) -> str:
        require(args, "projectPath", "scenePath")
        validate_path(args["projectPath"], "project path")
        scene_path = validate_path(args["scenePath"], "scene path")
        project = require_project(args["projectPath"])
        root_type = args.get("rootNodeType") or DEFAULT_ROOT_NODE_TYPE
        if root_type not in ROOT_NODE_TYPES:
            raise UnsupportedNodeType(root_type, list(ROOT_NODE_TYPES))

        _ensure_parent_dir(project_file(project, scene_path))
        result = await self.runner.run("create_scene", project, {
            "scene_path": to_resource_path(scene_path),
            "root_node_type": root_type,
        })
        return f"Scene created successfully at: {scene_path}\n\nOutput: {result.stdout}"

    async def add_node(self, args: Args) -> str:
        require(args, "projectPath", "scenePath", "nodeType", "nodeName")
        validate_path(args["projectPath"], "project path")
        scene_path = validate_path(args["scenePath"], "scene path")
        project = require_project(args["projectPath"])
        require_file(project, scene_path, "Scene file", _SCENE_MISSING_HINTS)

        node_type = args["nodeType"]
        node_name = args["nodeName"]
        if node_type not in NODE_TYPES:
            raise UnsupportedNodeType(node_type)
        properties = args.get("properties") or {}
        if not isinstance(properties, dict):
            raise GodotMCPError("properties must be an object", ['Pass properties as {"name": value}'])

        result = await self.runner.run("add_node", project, {
            "scene_path": to_resource_path(scene_path),
            "parent_node_path": args.get("parentNodePath") or "root",
            "node_type": node_type,
            "node_name": node_name,
            "properties": properties,
        })
        return f"Node '{node_name}' of type '{node_type}' added successfully to '{scene_path}'.\n\nOutput: {result.stdout}"

    async def load_sprite(self, args: Args) -> str:
        require(args, "projectPath", "scenePath", "nodePath", "texturePath")
        validate_path(args["projectPath"], "project path")
        scene_path = validate_path(args["scenePath"], "scene path")
        node_path = validate_path(args["nodePath"], "node path")
        texture_path = validate_path(args["texturePath"], "texture path")
        project = require_project(args["projectPath"])
        require_file(project, scene_path, "Scene file", _SCENE_MISSING_HINTS)
        require_file(
            project, texture_path, "Texture file",
            ["Ensure the texture path is correct", "Upload or create the texture file first"],
        )

        result = await self.runner.run("load_sprite", project, {
            "scene_path": to_resource_path(scene_path),
            "node_path": node_path,
            "texture_path": to_resource_path(texture_path),
        })
        return f"Sprite loaded successfully with texture: {texture_path}\n\nOutput: {result.stdout}"

    async def export_mesh_library(self, args: Args) -> str:
        require(args, "projectPath", "scenePath", "outputPath")
        validate_path(args["projectPath"], "project path")
        scene_path = validate_path(args["scenePath"], "scene path")
        output_path = validate_path(args["outputPath"], "output path")
        project = require_project(args["projectPath"])
        require_file(project, scene_path, "Scene file", _SCENE_MISSING_HINTS)

        names = args.get("meshItemNames")
        item_names = [str(n) for n in names] if isinstance(names, list) else []

        _ensure_parent_dir(project_file(project, output_path))
        result = await self.runner.run("export_mesh_library", project, {
            "scene_path": to_resource_path(scene_path),
            "output_path": to_resource_path(output_path),
            "mesh_item_names": item_names,
        })
        return f"MeshLibrary exported successfully to: {output_path}\n\nOutput: {result.stdout}"

    async def save_scene(self, args: Args) -> str:
        require(args, "projectPath", "scenePath")
        validate_path(args["projectPath"], "project path")
        scene_path = validate_path(args["scenePath"], "scene path")
        new_path = args.get("newPath") or None
        if new_path is not None:
            validate_path(new_path, "new path")
        project = require_project(args["projectPath"])
        require_file(project, scene_path, "Scene file", _SCENE_MISSING_HINTS)

        save_path = new_path or scene_path
        if new_path:
            _ensure_parent_dir(project_file(project, new_path))
        params: dict[str, Any] = {"scene_path": to_resource_path(scene_path)}
        if new_path:
            params["new_path"] = to_resource_path(new_path)
        result = await self.runner.run("save_scene", project, params)
        return f"Scene saved successfully to: {save_path}\n\nOutput: {result.stdout}"


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(path)
    if parent and not os.path.isdir(parent):
        logger.debug("Creating directory: %s", parent)
        os.makedirs(parent, exist_ok=True)
