"""
Tool Server Manager — launches tool server processes and calls their tools.

Usage:
    manager = ToolServerManager()

    # Register a server
    manager.register_server("tsx", [sys.executable, "-m", "tool_servers.servers.tsx_generator"])

    # Start it (initialize handshake + tool discovery)
    manager.start("tsx")

    # Call a tool
    result = manager.call("tsx", "list_templates", {"search": "form"})
    print(result.joined_text)

    # Stop everything
    manager.stop_all()
"""

from __future__ import annotations

import logging
from typing import Any

from tool_servers.errors import ToolServerError
from tool_servers.server import ToolResult
from tool_servers.transport import StdioTransport

logger = logging.getLogger(__name__)

CLIENT_INFO = {"name": "tool-servers-client", "version": "1.0.0"}


class ToolServerManager:
    """
    Manages the lifecycle of tool server processes.

    Responsibilities:
    - Launch tool servers as subprocesses (stdio transport)
    - Run the initialize handshake and discover tools
    - Route tool calls to the correct server
    - Graceful shutdown
    """

    def __init__(self):
        self._servers: dict[str, dict] = {}
        # server_id → {
        #   "command": [...],
        #   "transport": StdioTransport | None,
        #   "env": dict | None,
        #   "info": serverInfo from initialize,
        #   "tools": [schema, ...] (discovered after start),
        # }

    def register_server(
        self,
        server_id: str,
        command: list[str],
        env: dict[str, str] | None = None,
    ) -> None:
        """
        Register a tool server (does not start it yet).

        Args:
            server_id: Unique identifier for this server
            command: Command to launch the server process
            env: Optional environment variables
        """
        if server_id in self._servers:
            raise ValueError(f"Server already registered: {server_id}")
        self._servers[server_id] = {
            "command": command,
            "transport": None,
            "env": env,
            "info": {},
            "tools": [],
        }
        logger.info(f"Registered server: {server_id} ({' '.join(command)})")

    def _server(self, server_id: str) -> dict:
        server = self._servers.get(server_id)
        if not server:
            raise ValueError(f"Unknown server: {server_id}")
        return server

    def _request(self, server_id: str, method: str, params: dict[str, Any]) -> Any:
        transport = self._server(server_id).get("transport")
        if not transport or not transport.is_alive():
            raise RuntimeError(f"Server {server_id} is not running. Call start() first.")

        response = transport.send(method, params)
        if response.is_error:
            raise ToolServerError(
                response.error.get("code", 0), response.error.get("message", "")
            )
        return response.result

    def start(self, server_id: str) -> list[dict]:
        """
        Start a tool server, run the handshake and discover its tools.

        Returns:
            List of tool schemas from the server.
        """
        server = self._server(server_id)

        transport = StdioTransport(server["command"], server.get("env"))
        transport.start()
        server["transport"] = transport

        info = self._request(server_id, "initialize", {"clientInfo": CLIENT_INFO})
        transport.notify("notifications/initialized")
        server["info"] = info.get("serverInfo", {})

        server["tools"] = self._request(server_id, "tools/list", {}).get("tools", [])
        tool_names = [t["name"] for t in server["tools"]]
        logger.info(f"Started {server_id} ({server['info'].get('name')}): tools={tool_names}")

        return server["tools"]

    def start_all(self) -> dict[str, list[dict]]:
        """Start all registered servers. Returns {server_id: [tool_schemas]}."""
        results = {}
        for server_id in self._servers:
            try:
                results[server_id] = self.start(server_id)
            except (OSError, RuntimeError, ToolServerError) as e:
                logger.error(f"Failed to start {server_id}: {e}")
                results[server_id] = []
        return results

    def stop(self, server_id: str) -> None:
        """Stop a tool server."""
        server = self._servers.get(server_id)
        if server and server["transport"]:
            server["transport"].stop()
            server["transport"] = None
            logger.info(f"Stopped {server_id}")

    def stop_all(self) -> None:
        """Stop all running servers."""
        for server_id in list(self._servers.keys()):
            self.stop(server_id)

    def call(
        self,
        server_id: str,
        tool_name: str,
        arguments: dict[str, Any],
    ) -> ToolResult:
        """
        Call a tool on a specific server.

        Raises:
            ToolServerError: the server rejected the call (unknown tool,
                invalid arguments, internal error).
        """
        result = self._request(
            server_id, "tools/call", {"name": tool_name, "arguments": arguments}
        )
        return ToolResult(content=result.get("content", []), is_error=result.get("isError", False))

    def list_tools(self, server_id: str) -> list[dict]:
        """List discovered tools for a server."""
        server = self._servers.get(server_id)
        return server["tools"] if server else []

    def list_servers(self) -> dict[str, bool]:
        """List all servers and their running status."""
        return {sid: self.is_running(sid) for sid in self._servers}

    def is_running(self, server_id: str) -> bool:
        """Check if a specific server is running."""
        server = self._servers.get(server_id)
        return (
            server is not None
            and server["transport"] is not None
            and server["transport"].is_alive()
        )
