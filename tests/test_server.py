"""End-to-end tests through the MCP protocol using FastMCP's in-memory client."""

import json

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from godot_mcp.config import ServerConfig
from godot_mcp.gateway import TOOL_NAMES
from godot_mcp.server import create_server


@pytest.fixture
def mcp():
    return create_server(ServerConfig(godot_path="/nonexistent/godot"))


class TestServer:
    @pytest.mark.asyncio
    async def test_lists_every_tool(self, mcp) -> None:
        async with Client(mcp) as client:
            tools = {tool.name: tool for tool in await client.list_tools()}

        assert set(tools) == set(TOOL_NAMES)
        assert set(tools["add_node"].inputSchema["required"]) == {
            "projectPath", "scenePath", "nodeType", "nodeName",
        }
        assert tools["get_debug_output"].inputSchema.get("required", []) == []

    @pytest.mark.asyncio
    async def test_tool_error_is_reported(self, mcp) -> None:
        async with Client(mcp) as client:
            with pytest.raises(ToolError) as exc:
                await client.call_tool("get_debug_output", {})

        assert "No active Godot process" in str(exc.value)
        assert "Possible solutions" in str(exc.value)

    @pytest.mark.asyncio
    async def test_invalid_path_is_reported(self, mcp) -> None:
        async with Client(mcp) as client:
            with pytest.raises(ToolError) as exc:
                await client.call_tool("get_project_info", {"projectPath": "../secret"})

        assert "Invalid project path" in str(exc.value)

    @pytest.mark.asyncio
    async def test_list_projects(self, mcp, project) -> None:
        async with Client(mcp) as client:
            result = await client.call_tool("list_projects", {"directory": str(project.parent)})

        projects = json.loads(result.content[0].text)
        assert projects == [{"path": str(project), "name": "game"}]
