#!/usr/bin/env python3
"""Godot MCP Server.

Exposes Godot engine operations as MCP tools: launch the editor, run a
project and capture its output, list and inspect projects, and edit scene
files through the engine in headless mode.

Run with: godot-mcp   (or: python -m godot_mcp)
Or configure as an MCP server:
{
    "mcpServers": {
        "godot": {
            "command": "godot-mcp",
            "env": {"GODOT_PATH": "/path/to/godot", "DEBUG": "false"}
        }
    }
}
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastmcp import FastMCP

from godot_mcp.config import ServerConfig, setup_logging
from godot_mcp.engine import GodotEngine, locate_godot
from godot_mcp.gateway import GodotGateway
from godot_mcp.operations import OperationRunner
from godot_mcp.project_tools import register_project_tools
from godot_mcp.scene_tools import register_scene_tools
from godot_mcp.session import SessionSupervisor

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "You have access to tools for working with Godot projects on disk.\n\n"
    "Run control: launch_editor opens the editor; run_project starts the game "
    "in debug mode (only one at a time; a new run stops the previous one). "
    "Poll get_debug_output while it runs and call stop_project when done.\n\n"
    "Scene editing (create_scene, add_node, load_sprite, export_mesh_library, "
    "save_scene) runs Godot headless and writes the files directly. All paths "
    "are relative to projectPath; paths containing '..' are rejected. Node "
    "paths start at 'root' (e.g. 'root/Player').\n\n"
    "Use list_projects to find projects and get_project_info to see their "
    "layout. When a tool fails, read the 'Possible solutions' list in the "
    "error before retrying."
)


def build_gateway(config: ServerConfig) -> GodotGateway:
    engine = GodotEngine(locate_godot(config.godot_path), timeout=config.operation_timeout)
    return GodotGateway(engine, OperationRunner(engine), SessionSupervisor())


def create_server(config: ServerConfig | None = None, gateway: GodotGateway | None = None) -> FastMCP:
    """Build the FastMCP server and register every tool."""
    config = config or ServerConfig.from_env()
    gateway = gateway or build_gateway(config)

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[None]:
        try:
            yield
        finally:
            logger.debug("Cleaning up resources")
            await gateway.supervisor.shutdown()

    mcp = FastMCP("godot-mcp", instructions=INSTRUCTIONS, lifespan=lifespan)
    register_project_tools(mcp, gateway)
    register_scene_tools(mcp, gateway)
    return mcp


def main() -> None:
    config = ServerConfig.from_env()
    setup_logging(config.debug)
    if config.debug:
        logger.debug("Debug mode enabled from environment")
    mcp = create_server(config)
    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.debug("Interrupted, shutting down")


if __name__ == "__main__":
    main()
