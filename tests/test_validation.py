"""Tests for argument and path validation."""

import os

import pytest

from godot_mcp.errors import FileNotFound, InvalidPath, MissingParameter, NotAGodotProject
from godot_mcp.validation import is_safe_path, project_file, require, require_file, require_project, validate_path


class TestValidatePath:
    """Path safety is a shallow '..' and emptiness check."""

    @pytest.mark.parametrize("path", ["", "../outside", "scenes/../../etc", "a/..", None])
    def test_rejects_unsafe_paths(self, path) -> None:
        assert not is_safe_path(path)
        with pytest.raises(InvalidPath):
            validate_path(path, "scene path")

    @pytest.mark.parametrize("path", ["scenes/main.tscn", "/home/me/game", "res://icon.svg"])
    def test_accepts_plain_paths(self, path) -> None:
        assert validate_path(path) == path

    def test_error_mentions_argument_name(self) -> None:
        with pytest.raises(InvalidPath) as exc:
            validate_path("../x", "texture path")
        assert "texture path" in str(exc.value)
        assert ".." in str(exc.value)


class TestRequire:
    """Required keys must be present and non-empty."""

    def test_all_present(self) -> None:
        require({"projectPath": "/p", "scenePath": "a.tscn"}, "projectPath", "scenePath")

    def test_lists_every_missing_key(self) -> None:
        with pytest.raises(MissingParameter) as exc:
            require({"projectPath": "", "nodeName": None}, "projectPath", "scenePath", "nodeName")
        assert exc.value.keys == ["projectPath", "scenePath", "nodeName"]
        assert "Possible solutions" in str(exc.value)

    def test_false_is_not_missing(self) -> None:
        require({"recursive": False}, "recursive")


class TestRequireProject:
    def test_project_with_marker(self, project) -> None:
        assert require_project(str(project)) == str(project)

    def test_directory_without_marker(self, tmp_path) -> None:
        with pytest.raises(NotAGodotProject) as exc:
            require_project(str(tmp_path))
        assert "project.godot" in str(exc.value)

    def test_traversal_checked_first(self) -> None:
        with pytest.raises(InvalidPath):
            require_project("/tmp/../tmp")


class TestRequireFile:
    def test_existing_file(self, project) -> None:
        (project / "main.tscn").write_text("")
        assert require_file(str(project), "main.tscn", "Scene file").endswith("main.tscn")

    def test_missing_file(self, project) -> None:
        with pytest.raises(FileNotFound) as exc:
            require_file(str(project), "missing.tscn", "Scene file", ["Use create_scene first"])
        assert str(exc.value).startswith("Scene file does not exist: missing.tscn")
        assert exc.value.suggestions == ["Use create_scene first"]

    @pytest.mark.parametrize("relative", ["res://main.tscn", "/main.tscn"])
    def test_resource_and_rooted_forms(self, project, relative) -> None:
        (project / "main.tscn").write_text("")
        assert require_file(str(project), relative, "Scene file") == str(project / "main.tscn")


class TestProjectFile:
    @pytest.mark.parametrize("relative", [
        "x/a.tscn",
        "/x/a.tscn",
        "res://x/a.tscn",
        "res:///x/a.tscn",
        "x\\a.tscn",
    ])
    def test_resolves_inside_project(self, relative) -> None:
        assert project_file("/games/demo", relative) == os.path.join("/games/demo", "x", "a.tscn")
