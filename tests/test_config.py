"""Tests for environment configuration and error rendering."""

import logging

import pytest

from godot_mcp.config import ServerConfig, setup_logging
from godot_mcp.errors import EngineReportedFailure, GodotMCPError, NoActiveSession


class TestServerConfig:
    def test_defaults(self) -> None:
        config = ServerConfig.from_env({})
        assert config == ServerConfig(godot_path=None, debug=False, operation_timeout=None)

    def test_reads_environment(self) -> None:
        config = ServerConfig.from_env({
            "GODOT_PATH": "/opt/godot/godot",
            "DEBUG": "TRUE",
            "GODOT_MCP_TIMEOUT": "45",
        })
        assert config.godot_path == "/opt/godot/godot"
        assert config.debug is True
        assert config.operation_timeout == 45.0

    @pytest.mark.parametrize("value", ["false", "", "0", "no"])
    def test_debug_off(self, value) -> None:
        assert ServerConfig.from_env({"DEBUG": value}).debug is False

    @pytest.mark.parametrize("value", ["soon", "-1", "0"])
    def test_bad_timeout_ignored(self, value) -> None:
        assert ServerConfig.from_env({"GODOT_MCP_TIMEOUT": value}).operation_timeout is None

    def test_empty_godot_path_is_unset(self) -> None:
        assert ServerConfig.from_env({"GODOT_PATH": ""}).godot_path is None


class TestSetupLogging:
    def test_debug_level_and_single_handler(self) -> None:
        setup_logging(debug=True)
        setup_logging(debug=True)
        log = logging.getLogger("godot_mcp")
        assert log.level == logging.DEBUG
        assert len(log.handlers) == 1
        setup_logging(debug=False)
        assert log.level == logging.WARNING


class TestErrorRendering:
    def test_message_only(self) -> None:
        assert str(GodotMCPError("boom")) == "boom"

    def test_suggestions_appended(self) -> None:
        err = GodotMCPError("boom", ["try this", "or that"])
        assert str(err) == "boom\n\nPossible solutions:\n- try this\n- or that"

    def test_reported_failure_keeps_code(self) -> None:
        err = EngineReportedFailure("Failed to save scene: 7", "save_failed")
        assert err.code == "save_failed"
        assert err.message == "Failed to save scene: 7"

    def test_no_active_session_default_hints(self) -> None:
        err = NoActiveSession()
        assert err.message == "No active Godot process."
        assert "Use run_project to start a Godot project first" in err.suggestions
