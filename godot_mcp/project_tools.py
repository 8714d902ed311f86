"""MCP tool definitions for Godot project and run control.

These tools launch the editor, run a project in debug mode and read back its
output, and inspect projects on disk. Argument names are camelCase because
they are the wire contract of the tool schemas.
"""

from __future__ import annotations

from fastmcp import FastMCP

from godot_mcp.gateway import GodotGateway


def register_project_tools(mcp: FastMCP, gateway: GodotGateway) -> None:
    """Register run-control and project tools with the MCP server."""

    # --- Run Control ---

    @mcp.tool
    async def launch_editor(projectPath: str) -> str:
        """Launch Godot editor for a specific project.

        Args:
            projectPath: Path to the Godot project directory.
        """
        return await gateway.dispatch("launch_editor", {"projectPath": projectPath})

    @mcp.tool
    async def run_project(projectPath: str, scene: str | None = None) -> str:
        """Run the Godot project in debug mode and capture its output.

        Only one project runs at a time; starting another stops the current one.
        Use get_debug_output to read what it prints and stop_project to end it.

        Args:
            projectPath: Path to the Godot project directory.
            scene: Optional specific scene to run (e.g., 'res://scenes/level_1.tscn').
        """
        args = {"projectPath": projectPath}
        if scene is not None:
            args["scene"] = scene
        return await gateway.dispatch("run_project", args)

    @mcp.tool
    async def get_debug_output() -> str:
        """Get the current debug output and errors of the running project.

        Returns JSON {"output": [...], "errors": [...]} with every stdout and
        stderr line captured so far.
        """
        return await gateway.dispatch("get_debug_output")

    @mcp.tool
    async def stop_project() -> str:
        """Stop the currently running Godot project.

        Returns JSON {"message", "finalOutput", "finalErrors"}.
        """
        return await gateway.dispatch("stop_project")

    # --- Project Tools ---

    @mcp.tool
    async def get_godot_version() -> str:
        """Get the installed Godot version."""
        return await gateway.dispatch("get_godot_version")

    @mcp.tool
    async def list_projects(directory: str, recursive: bool = False) -> str:
        """List Godot projects in a directory.

        Args:
            directory: Directory to search for Godot projects.
            recursive: Whether to search recursively (default: false).
        """
        return await gateway.dispatch("list_projects", {"directory": directory, "recursive": recursive})

    @mcp.tool
    async def get_project_info(projectPath: str) -> str:
        """Retrieve metadata about a Godot project: name, engine version, and layout.

        Args:
            projectPath: Path to the Godot project directory.
        """
        return await gateway.dispatch("get_project_info", {"projectPath": projectPath})
