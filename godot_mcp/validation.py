"""Argument and path validation shared by every tool handler.

The path check is intentionally shallow: it rejects empty strings and ``..``
segments, nothing more. It does not resolve symlinks or confine paths to a
root directory.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

from godot_mcp.errors import FileNotFound, InvalidPath, MissingParameter, NotAGodotProject
from godot_mcp.projects import PROJECT_MARKER


def is_safe_path(path: Any) -> bool:
    """Return True if *path* is a non-empty string without ``..``."""
    return isinstance(path, str) and bool(path) and ".." not in path


def validate_path(path: Any, name: str = "path") -> str:
    if not is_safe_path(path):
        raise InvalidPath(name, path)
    return path


def require(args: Mapping[str, Any], *keys: str) -> None:
    """Raise MissingParameter listing every key that is absent, None or ''."""
    missing = [k for k in keys if args.get(k) is None or args.get(k) == ""]
    if missing:
        raise MissingParameter(missing)


def require_project(project_path: str) -> str:
    """Validate *project_path* and make sure it holds a project.godot file."""
    validate_path(project_path, "project path")
    if not os.path.exists(os.path.join(project_path, PROJECT_MARKER)):
        raise NotAGodotProject(project_path)
    return project_path


def project_file(project_path: str, relative: str) -> str:
    """Resolve a project path the same way ``res://`` does.

    A ``res://`` prefix and leading separators are dropped, so ``/scenes/a.tscn``,
    ``res://scenes/a.tscn`` and ``scenes/a.tscn`` all land inside the project.
    """
    if relative.startswith("res://"):
        relative = relative[len("res://"):]
    relative = relative.replace("\\", "/").lstrip("/")
    return os.path.join(project_path, *relative.split("/"))


def require_file(project_path: str, relative: str, what: str, suggestions: list[str] | None = None) -> str:
    """Return the absolute path of *relative* inside the project, or raise FileNotFound."""
    full = project_file(project_path, relative)
    if not os.path.exists(full):
        raise FileNotFound(what, relative, suggestions)
    return full
