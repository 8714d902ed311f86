"""Project discovery and metadata read straight from the filesystem."""

from __future__ import annotations

import logging
import os
import re
from typing import Any

logger = logging.getLogger(__name__)

# A directory is a Godot project iff it contains this file.
PROJECT_MARKER = "project.godot"

_ASSET_DIRS = {"assets", "textures", "models", "sounds", "music"}

# config/name="My Game" inside the [application] section of project.godot
_CONFIG_NAME_RE = re.compile(r'^\s*config/name\s*=\s*"((?:[^"\\]|\\.)*)"', re.MULTILINE)


def is_godot_project(path: str) -> bool:
    return os.path.isfile(os.path.join(path, PROJECT_MARKER))


def find_projects(directory: str, recursive: bool = False) -> list[dict[str, str]]:
    """Find Godot projects in *directory*.

    The directory itself is listed when it is a project. Without *recursive*
    only immediate subdirectories are checked. With *recursive*, hidden
    directories are skipped and a subdirectory that is a project is listed
    but not descended into.
    """
    projects: list[dict[str, str]] = []
    if is_godot_project(directory):
        projects.append({"path": directory, "name": os.path.basename(os.path.normpath(directory))})

    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except OSError as e:
        logger.debug("Error searching directory %s: %s", directory, e)
        return projects

    for entry in entries:
        if not entry.is_dir():
            continue
        subdir = os.path.join(directory, entry.name)
        if not recursive:
            if is_godot_project(subdir):
                projects.append({"path": subdir, "name": entry.name})
            continue
        if entry.name.startswith("."):
            continue
        if is_godot_project(subdir):
            projects.append({"path": subdir, "name": entry.name})
        else:
            projects.extend(find_projects(subdir, recursive=True))
    return projects


def read_project_name(project_path: str) -> str:
    """Return ``config/name`` from project.godot, or the directory name."""
    fallback = os.path.basename(os.path.normpath(project_path))
    try:
        with open(os.path.join(project_path, PROJECT_MARKER), encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        logger.debug("Could not read %s in %s: %s", PROJECT_MARKER, project_path, e)
        return fallback
    m = _CONFIG_NAME_RE.search(text)
    if m and m.group(1):
        return m.group(1).replace('\\"', '"')
    return fallback


def project_structure(project_path: str) -> dict[str, Any]:
    """Classify the project's top-level directories by naming convention."""
    structure: dict[str, Any] = {"scenes": [], "scripts": [], "assets": [], "other": []}
    try:
        entries = sorted(os.scandir(project_path), key=lambda e: e.name)
    except OSError as e:
        logger.debug("Error getting project structure: %s", e)
        return {"error": "Failed to get project structure"}

    for entry in entries:
        if not entry.is_dir():
            continue
        lowered = entry.name.lower()
        if lowered.startswith("."):
            continue
        if "scene" in lowered:
            structure["scenes"].append(entry.name)
        elif "script" in lowered:
            structure["scripts"].append(entry.name)
        elif lowered in _ASSET_DIRS:
            structure["assets"].append(entry.name)
        else:
            structure["other"].append(entry.name)
    return structure
