"""
Bridge between running tool servers and LangChain.

Wraps each discovered tool in a LangChain StructuredTool whose input
schema is the tool's declared inputSchema, so an agent can call the
server's tools directly.

Usage:
    from tool_servers.bridge import bridged_tools

    tools = bridged_tools(manager)
    agent = create_agent(model, tools)
"""

from __future__ import annotations

from typing import Any

from langchain_core.tools import StructuredTool

from tool_servers.errors import ToolServerError
from tool_servers.manager import ToolServerManager


def mcp_to_langchain_tool(
    manager: ToolServerManager,
    server_id: str,
    tool_name: str,
    description_override: str | None = None,
) -> StructuredTool:
    """
    Create a LangChain StructuredTool that proxies to a tool server call.

    Args:
        manager: The ToolServerManager managing the server
        server_id: Which server the tool lives on
        tool_name: The tool name (as registered on the server)
        description_override: Optional override for the tool description

    Returns:
        A StructuredTool returning the tool's text reply.
    """
    tools = manager.list_tools(server_id)
    tool_schema = next((t for t in tools if t["name"] == tool_name), None)
    if tool_schema is None:
        raise ValueError(f"Tool {tool_name!r} was not discovered on {server_id!r}")

    description = description_override or tool_schema.get("description") or tool_name

    def _call_tool(**kwargs: Any) -> str:
        """Proxy call to the tool server."""
        try:
            return manager.call(server_id, tool_name, kwargs).joined_text
        except (ToolServerError, RuntimeError) as e:
            return f"Error calling {server_id}/{tool_name}: {e}"

    return StructuredTool.from_function(
        func=_call_tool,
        name=tool_name,
        description=description,
        args_schema=tool_schema.get("inputSchema") or {"type": "object", "properties": {}},
    )


def bridged_tools(manager: ToolServerManager) -> list[StructuredTool]:
    """LangChain tools for every tool on every running server."""
    bridged = []
    for server_id, running in manager.list_servers().items():
        if not running:
            continue
        for tool_schema in manager.list_tools(server_id):
            bridged.append(mcp_to_langchain_tool(manager, server_id, tool_schema["name"]))
    return bridged
