"""
Tool server base classes.

A tool server is a standalone process that:
1. Reads JSON-RPC requests from stdin
2. Validates arguments and dispatches to registered ToolHandlers
3. Writes JSON-RPC responses to stdout

To create a tool server:

    from tool_servers.schema import Field
    from tool_servers.server import StdioToolServer, ToolHandler

    class Greet(ToolHandler):
        name = "greet"
        description = "Say hello"
        parameters = (
            Field("who", "string", description="Who to greet", required=True),
        )

        def handle(self, args: dict) -> str:
            return f"Hello, {args['who']}!"

    if __name__ == "__main__":
        server = StdioToolServer("greeter", "0.1.0")
        server.register(Greet())
        sys.exit(server.run())
"""

from __future__ import annotations

import json
import os
import sys
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, TextIO

from tool_servers.errors import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    PARSE_ERROR,
    InternalError,
    InvalidArgument,
    MethodNotFound,
    ToolError,
)
from tool_servers.schema import Field, object_schema, validate_arguments

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

LOG_LEVEL_ENV = "TOOL_SERVER_LOG_LEVEL"


def configure_logging(level: str | None = None) -> None:
    """Log to stderr; stdout carries protocol messages only."""
    level = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@dataclass
class ToolResult:
    """Reply of a tool call: text content blocks plus an error flag."""

    content: list[dict[str, str]] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> "ToolResult":
        return cls(content=[{"type": "text", "text": text}], is_error=is_error)

    @property
    def joined_text(self) -> str:
        return "\n".join(block["text"] for block in self.content if block.get("type") == "text")

    def to_dict(self) -> dict:
        return {"content": self.content, "isError": self.is_error}


class ToolHandler(ABC):
    """
    Base class for a tool implementation.

    Subclasses define what a tool does. The registry validates arguments
    before handle() sees them; the server handles transport.
    """

    # Subclasses must set these
    name: str = ""
    description: str = ""
    parameters: tuple[Field, ...] = ()

    # Prefix of the text reply when handle() raises a ToolError
    failure_message: str = "Error running tool"

    @abstractmethod
    def handle(self, args: dict[str, Any]) -> ToolResult | str:
        """
        Execute the tool with already validated arguments.

        Args:
            args: Normalized argument dict (defaults applied)

        Returns:
            A ToolResult, or plain text for a single text block
        """
        ...

    def invoke(self, args: dict[str, Any]) -> ToolResult:
        """Run handle() and turn classified failures into an error result."""
        try:
            result = self.handle(args)
        except ToolError as e:
            logger.warning(f"{self.name} failed: {e}")
            return ToolResult.text(f"❌ {self.failure_message}: {e}", is_error=True)
        if isinstance(result, str):
            return ToolResult.text(result)
        return result

    def get_schema(self) -> dict:
        """Return the tool schema for discovery."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": object_schema(self.parameters),
        }


class ToolRegistry:
    """Name → handler map with argument validation on dispatch."""

    def __init__(self):
        self._handlers: dict[str, ToolHandler] = {}

    def register(self, handler: ToolHandler) -> None:
        """Register a tool handler. Names must be unique."""
        if not handler.name:
            raise ValueError(f"ToolHandler {handler.__class__.__name__} has no name")
        if handler.name in self._handlers:
            raise ValueError(f"Tool already registered: '{handler.name}'")
        self._handlers[handler.name] = handler
        logger.info(f"Registered tool: {handler.name}")

    def names(self) -> list[str]:
        return list(self._handlers)

    def get(self, name: str) -> ToolHandler:
        handler = self._handlers.get(name)
        if handler is None:
            raise MethodNotFound(
                f"Unknown tool: '{name}'. Available: {self.names()}"
            )
        return handler

    def list_tools(self) -> list[dict]:
        """Schemas of all registered tools, in registration order."""
        return [h.get_schema() for h in self._handlers.values()]

    def dispatch(self, name: str, args: dict[str, Any] | None) -> ToolResult:
        """
        Look up, validate and invoke a tool.

        Raises:
            MethodNotFound: unknown tool name
            InvalidArgument: arguments do not match the declared shape
            InternalError: the handler raised something unexpected
        """
        handler = self.get(name)
        validated = validate_arguments(handler.parameters, args, tool=name)
        logger.debug(f"Calling {name} with {validated}")
        try:
            return handler.invoke(validated)
        except ToolError:
            raise
        except Exception as e:
            logger.exception(f"Tool {name} raised")
            raise InternalError(f"Tool execution failed: {e}") from e


class StdioToolServer:
    """
    JSON-RPC tool server that communicates via stdin/stdout.

    Protocol:
    - One JSON-RPC message per line
    - Supports methods:
        - "initialize" → server info and capabilities
        - "tools/list" → returns registered tool schemas
        - "tools/call" → calls a tool by name with arguments
        - "ping"       → health check
    - Messages without an id are notifications and get no reply
    """

    def __init__(self, name: str, version: str, registry: ToolRegistry | None = None):
        self.name = name
        self.version = version
        self.registry = registry if registry is not None else ToolRegistry()

    def register(self, handler: ToolHandler) -> None:
        """Register a tool handler."""
        self.registry.register(handler)

    def run(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> int:
        """
        Main loop: read requests from stdin, dispatch, write responses to stdout.

        This blocks until stdin is closed (parent process terminates).

        Returns:
            Process exit code (0 on clean shutdown).
        """
        stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout

        logger.info(f"{self.name} v{self.version} starting with "
                    f"{len(self.registry.names())} tools: {self.registry.names()}")

        for line in stdin:
            line = line.strip()
            if not line:
                continue

            try:
                request = json.loads(line)
            except json.JSONDecodeError as e:
                self._write_error(None, PARSE_ERROR, f"Parse error: {e}")
                continue

            response = self.handle_message(request)
            if response is not None:
                self._write(response)

        logger.info(f"{self.name} stdin closed, shutting down")
        return 0

    def handle_message(self, request: Any) -> dict | None:
        """Process one decoded message and build its response (None for notifications)."""
        if not isinstance(request, dict):
            return _error(None, INVALID_REQUEST, "Invalid request: expected an object")

        is_notification = "id" not in request
        request_id = request.get("id")
        method = request.get("method", "")
        if not isinstance(method, str):
            return _error(request_id, INVALID_REQUEST, "Invalid request: method must be a string")
        params = request.get("params")
        if params is None:
            params = {}

        try:
            result = self._dispatch(method, params)
        except ToolError as e:
            if is_notification:
                return None
            return _error(request_id, e.code, e.message)
        except Exception as e:
            logger.exception(f"Unhandled error in {method}")
            if is_notification:
                return None
            return _error(request_id, INTERNAL_ERROR, str(e))

        if is_notification:
            return None
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    def _dispatch(self, method: str, params: Any) -> Any:
        """Route a method call to the appropriate handler."""

        if method == "initialize":
            return {
                "protocolVersion": PROTOCOL_VERSION,
                "serverInfo": {"name": self.name, "version": self.version},
                "capabilities": {"tools": {}},
            }

        if method.startswith("notifications/"):
            return None

        if method == "ping":
            return {"status": "ok", "server": self.name, "tools": self.registry.names()}

        if method == "tools/list":
            return {"tools": self.registry.list_tools()}

        if method == "tools/call":
            if not isinstance(params, dict):
                raise InvalidArgument(["params: expected object"])
            tool_name = params.get("name", "")
            if not isinstance(tool_name, str):
                raise InvalidArgument([f"name: expected string, got {type(tool_name).__name__}"])
            tool_args = params.get("arguments")
            return self.registry.dispatch(tool_name, tool_args).to_dict()

        raise MethodNotFound(f"Unknown method: '{method}'")

    def _write(self, response: dict) -> None:
        """Write one JSON-RPC message to stdout."""
        self._stdout.write(json.dumps(response) + "\n")
        self._stdout.flush()

    def _write_error(self, request_id: Any, code: int, message: str) -> None:
        """Write a JSON-RPC error response to stdout."""
        self._write(_error(request_id, code, message))


def _error(request_id: Any, code: int, message: str) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": {"code": code, "message": message},
    }
