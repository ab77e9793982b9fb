"""
Tool Servers — stdio tool servers and the client harness that drives them.

Architecture:
    ┌──────────────┐     stdio      ┌──────────────┐
    │    Client     │ ──────────── │  Tool Server  │
    │ (manager/LC)  │  JSON-RPC    │  (subprocess) │
    └──────────────┘     pipes     └──────────────┘

Each tool server is a standalone process that communicates via
stdin/stdout using line-delimited JSON-RPC 2.0 messages.

Servers:
    tool_servers.servers.tsx_generator  generate_component, list_templates,
                                        get_project_info
    tool_servers.servers.weather        get_current_weather,
                                        get_weather_forecast,
                                        get_weather_alerts

StdioToolServer handles the transport, ToolRegistry validates and
dispatches, ToolHandler subclasses implement the tools. The
ToolServerManager launches servers and calls their tools; the bridge
turns discovered tools into LangChain StructuredTools.
"""

from tool_servers.server import StdioToolServer, ToolHandler, ToolRegistry, ToolResult
from tool_servers.manager import ToolServerManager

# Bridge needs langchain-core; imported lazily so servers start without it
def mcp_to_langchain_tool(*args, **kwargs):
    from tool_servers.bridge import mcp_to_langchain_tool as _impl
    return _impl(*args, **kwargs)

def bridged_tools(*args, **kwargs):
    from tool_servers.bridge import bridged_tools as _impl
    return _impl(*args, **kwargs)

__all__ = [
    "StdioToolServer",
    "ToolHandler",
    "ToolRegistry",
    "ToolResult",
    "ToolServerManager",
    "mcp_to_langchain_tool",
    "bridged_tools",
]
