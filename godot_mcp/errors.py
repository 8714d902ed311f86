"""Error taxonomy for the Godot MCP tools.

Every error is a ``ToolError`` so FastMCP turns it into an MCP error result
(``isError: true``) instead of crashing the server. The rendered text is the
message followed by a short "Possible solutions" list when one is attached.
"""

from __future__ import annotations

from fastmcp.exceptions import ToolError


GENERIC_HINTS: list[str] = [
    "Ensure Godot is installed correctly",
    "Check if the GODOT_PATH environment variable is set correctly",
    "Verify the project path is accessible",
]


class GodotMCPError(ToolError):
    """Base class for every error a Godot tool can report."""

    def __init__(self, message: str, suggestions: list[str] | None = None) -> None:
        self.message = message
        self.suggestions = list(suggestions or [])
        super().__init__(self.render())

    def render(self) -> str:
        if not self.suggestions:
            return self.message
        return self.message + "\n\nPossible solutions:\n- " + "\n- ".join(self.suggestions)


class MissingParameter(GodotMCPError):
    def __init__(self, keys: list[str]) -> None:
        self.keys = list(keys)
        noun = "parameter" if len(self.keys) == 1 else "parameters"
        super().__init__(
            f"Missing required {noun}: {', '.join(self.keys)}",
            [f"Provide {', '.join(self.keys)}"],
        )


class InvalidPath(GodotMCPError):
    def __init__(self, name: str, path: str | None) -> None:
        self.name = name
        self.path = path
        super().__init__(
            f"Invalid {name}: {path!r}",
            ['Provide a valid path without ".." or other potentially unsafe characters'],
        )


class NotAGodotProject(GodotMCPError):
    def __init__(self, project_path: str) -> None:
        self.project_path = project_path
        super().__init__(
            f"Not a valid Godot project: {project_path}",
            [
                "Ensure the path points to a directory containing a project.godot file",
                "Use list_projects to find valid Godot projects",
            ],
        )


class FileNotFound(GodotMCPError):
    def __init__(self, what: str, path: str, suggestions: list[str] | None = None) -> None:
        self.what = what
        self.path = path
        super().__init__(f"{what} does not exist: {path}", suggestions)


class UnsupportedNodeType(GodotMCPError):
    def __init__(self, node_type: str, supported: list[str] | None = None) -> None:
        self.node_type = node_type
        hints = ["Use a built-in Godot node class name (e.g. Node2D, Sprite2D, Node3D)"]
        if supported:
            hints.append("Supported types: " + ", ".join(supported))
        super().__init__(f"Unsupported node type: {node_type}", hints)


class EngineInvocationFailed(GodotMCPError):
    """The engine could not be started, timed out, or exited abnormally."""


class EngineReportedFailure(GodotMCPError):
    """The operations script ran and reported an error outcome."""

    def __init__(self, message: str, code: str, suggestions: list[str] | None = None) -> None:
        self.code = code
        super().__init__(message, suggestions)


class NoActiveSession(GodotMCPError):
    def __init__(self, message: str = "No active Godot process.", suggestions: list[str] | None = None) -> None:
        super().__init__(
            message,
            suggestions
            or [
                "Use run_project to start a Godot project first",
                "Check if the Godot process crashed unexpectedly",
            ],
        )


class UnknownTool(GodotMCPError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")
