"""Integration tests: a real tool server subprocess driven by the manager."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from tool_servers.bridge import bridged_tools, mcp_to_langchain_tool
from tool_servers.errors import INVALID_PARAMS, METHOD_NOT_FOUND, ToolServerError
from tool_servers.manager import ToolServerManager

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def manager(tmp_path):
    """Manager with the TSX generator server started against a temp config."""
    env = {
        **os.environ,
        "VIBE_CONFIG_PATH": str(tmp_path / "vibe.config.json"),
        "PYTHONPATH": os.pathsep.join(filter(None, [str(PROJECT_ROOT), os.environ.get("PYTHONPATH")])),
    }
    manager = ToolServerManager()
    manager.register_server(
        "tsx", [sys.executable, "-m", "tool_servers.servers.tsx_generator"], env=env
    )
    manager.start("tsx")
    yield manager
    manager.stop_all()


class TestToolServerManager:
    """Handshake, discovery and calls over stdio."""

    def test_discovers_tools(self, manager: ToolServerManager) -> None:
        names = [t["name"] for t in manager.list_tools("tsx")]
        assert names == ["generate_component", "list_templates", "get_project_info"]
        assert manager.list_servers() == {"tsx": True}

    def test_call_tool(self, manager: ToolServerManager) -> None:
        result = manager.call("tsx", "list_templates", {"search": "layout"})
        assert not result.is_error
        assert "layout-page" in result.joined_text

    def test_generate_over_stdio(self, manager: ToolServerManager, tmp_path) -> None:
        target = tmp_path / "out"
        result = manager.call("tsx", "generate_component", {
            "template": "component-form", "name": "LoginForm",
            "outputDir": str(target), "withTests": False,
        })
        assert "Files created: 2" in result.joined_text
        assert (target / "LoginForm.tsx").is_file()

    def test_unknown_tool(self, manager: ToolServerManager) -> None:
        with pytest.raises(ToolServerError) as exc_info:
            manager.call("tsx", "nope", {})
        assert exc_info.value.code == METHOD_NOT_FOUND

    def test_invalid_arguments(self, manager: ToolServerManager) -> None:
        with pytest.raises(ToolServerError) as exc_info:
            manager.call("tsx", "generate_component", {"name": "X"})
        assert exc_info.value.code == INVALID_PARAMS
        assert "template: required" in exc_info.value.message

    def test_stop(self, manager: ToolServerManager) -> None:
        manager.stop("tsx")
        assert not manager.is_running("tsx")
        with pytest.raises(RuntimeError, match="not running"):
            manager.call("tsx", "list_templates", {})

    def test_duplicate_server_id(self, manager: ToolServerManager) -> None:
        with pytest.raises(ValueError):
            manager.register_server("tsx", ["true"])


class TestLangChainBridge:
    """Discovered tools exposed as StructuredTools."""

    def test_bridged_tools(self, manager: ToolServerManager) -> None:
        tools = bridged_tools(manager)
        assert [t.name for t in tools] == ["generate_component", "list_templates", "get_project_info"]
        assert tools[1].description == "List available component templates"

    def test_bridged_call_returns_text(self, manager: ToolServerManager) -> None:
        tool = mcp_to_langchain_tool(manager, "tsx", "list_templates")
        assert "component-form" in tool.func(search="form")

    def test_bridged_call_reports_errors(self, manager: ToolServerManager) -> None:
        tool = mcp_to_langchain_tool(manager, "tsx", "generate_component")
        assert tool.func(name="X").startswith("Error calling tsx/generate_component")

    def test_unknown_tool_rejected(self, manager: ToolServerManager) -> None:
        with pytest.raises(ValueError):
            mcp_to_langchain_tool(manager, "tsx", "nope")
