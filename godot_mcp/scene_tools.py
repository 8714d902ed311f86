"""MCP tool definitions for editing scene files headlessly.

Every tool here runs Godot in headless mode against the bundled operations
script; the project must contain a project.godot file and paths are relative
to the project directory.
"""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from godot_mcp.gateway import GodotGateway


def _present(**kwargs: Any) -> dict[str, Any]:
    """Drop optional arguments the caller left out."""
    return {k: v for k, v in kwargs.items() if v is not None}


def register_scene_tools(mcp: FastMCP, gateway: GodotGateway) -> None:
    """Register scene editing tools with the MCP server."""

    @mcp.tool
    async def create_scene(projectPath: str, scenePath: str, rootNodeType: str = "Node2D") -> str:
        """Create a new Godot scene file with a root node named 'root'.

        Args:
            projectPath: Path to the Godot project directory.
            scenePath: Path where the scene file will be saved (relative to project).
            rootNodeType: Type of the root node: 'Node2D', 'Node3D', 'Control', or 'Node'.
        """
        return await gateway.dispatch(
            "create_scene", _present(projectPath=projectPath, scenePath=scenePath, rootNodeType=rootNodeType),
        )

    @mcp.tool
    async def add_node(
        projectPath: str,
        scenePath: str,
        nodeType: str,
        nodeName: str,
        parentNodePath: str = "root",
        properties: dict[str, Any] | None = None,
    ) -> str:
        """Add a node to an existing scene.

        Args:
            projectPath: Path to the Godot project directory.
            scenePath: Path to the scene file (relative to project).
            nodeType: Type of node to add (e.g., 'Sprite2D', 'CollisionShape2D').
            nodeName: Name for the new node.
            parentNodePath: Path to the parent node (e.g., 'root' or 'root/Player').
            properties: Optional properties to set on the node. Properties the node
                        does not have are skipped. Vectors use arrays: {"position": [100, 200]}.
        """
        return await gateway.dispatch("add_node", _present(
            projectPath=projectPath,
            scenePath=scenePath,
            nodeType=nodeType,
            nodeName=nodeName,
            parentNodePath=parentNodePath,
            properties=properties,
        ))

    @mcp.tool
    async def load_sprite(projectPath: str, scenePath: str, nodePath: str, texturePath: str) -> str:
        """Load a texture into a Sprite2D, Sprite3D, or TextureRect node.

        Args:
            projectPath: Path to the Godot project directory.
            scenePath: Path to the scene file (relative to project).
            nodePath: Path to the sprite node (e.g., 'root/Player/Sprite2D').
            texturePath: Path to the texture file (relative to project).
        """
        return await gateway.dispatch("load_sprite", {
            "projectPath": projectPath,
            "scenePath": scenePath,
            "nodePath": nodePath,
            "texturePath": texturePath,
        })

    @mcp.tool
    async def export_mesh_library(
        projectPath: str,
        scenePath: str,
        outputPath: str,
        meshItemNames: list[str] | None = None,
    ) -> str:
        """Export a scene's meshes as a MeshLibrary resource.

        Each immediate child of the scene root with a MeshInstance3D (itself or a
        direct child) becomes one library item.

        Args:
            projectPath: Path to the Godot project directory.
            scenePath: Path to the scene file (.tscn) to export.
            outputPath: Path where the mesh library (.res) will be saved.
            meshItemNames: Optional names of specific mesh items to include (defaults to all).
        """
        return await gateway.dispatch("export_mesh_library", _present(
            projectPath=projectPath,
            scenePath=scenePath,
            outputPath=outputPath,
            meshItemNames=meshItemNames,
        ))

    @mcp.tool
    async def save_scene(projectPath: str, scenePath: str, newPath: str | None = None) -> str:
        """Save a scene file, optionally to a new path (for creating variants).

        Args:
            projectPath: Path to the Godot project directory.
            scenePath: Path to the scene file (relative to project).
            newPath: Optional new path to save the scene to.
        """
        return await gateway.dispatch(
            "save_scene", _present(projectPath=projectPath, scenePath=scenePath, newPath=newPath),
        )
