"""
Client-side transport for talking to a tool server subprocess.

StdioTransport launches the server and exchanges one JSON-RPC message
per line over its stdin/stdout. The server's stderr (its log output) is
left attached to ours.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class JsonRpcRequest:
    """JSON-RPC 2.0 request (a notification when id is None)."""
    method: str
    params: dict[str, Any]
    id: int | str | None = None

    def to_json(self) -> str:
        message: dict[str, Any] = {"jsonrpc": "2.0", "method": self.method, "params": self.params}
        if self.id is not None:
            message["id"] = self.id
        return json.dumps(message)


@dataclass
class JsonRpcResponse:
    """JSON-RPC 2.0 response."""
    id: int | str | None
    result: Any = None
    error: dict | None = None

    @classmethod
    def from_json(cls, data: str) -> "JsonRpcResponse":
        parsed = json.loads(data)
        return cls(
            id=parsed.get("id"),
            result=parsed.get("result"),
            error=parsed.get("error"),
        )

    @property
    def is_error(self) -> bool:
        return self.error is not None


class StdioTransport:
    """
    JSON-RPC over stdin/stdout pipes to a subprocess.

    Requests are answered in order, so send() writes one line and reads
    exactly one line back.
    """

    def __init__(self, command: list[str], env: dict[str, str] | None = None):
        """
        Args:
            command: Command to launch the tool server process.
                     e.g., ["python", "-m", "tool_servers.servers.weather"]
            env: Optional environment variables for the subprocess.
        """
        self.command = command
        self.env = env
        self._process: subprocess.Popen | None = None
        self._request_id = 0

    def start(self) -> None:
        """Launch the tool server subprocess."""
        if self.is_alive():
            logger.warning("Transport already running, stopping first")
            self.stop()

        logger.info(f"Starting stdio transport: {' '.join(self.command)}")
        self._process = subprocess.Popen(
            self.command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            env=self.env,
            bufsize=1,  # Line-buffered
        )

    def stop(self) -> None:
        """Close the server's stdin and wait for it to exit."""
        if self._process:
            if self._process.stdin:
                self._process.stdin.close()
            try:
                self._process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self._process.kill()
                self._process.wait()
            logger.info(f"Stdio transport stopped (exit code {self._process.returncode})")
            self._process = None

    def is_alive(self) -> bool:
        """Check if the subprocess is running."""
        return self._process is not None and self._process.poll() is None

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a notification; no response is expected."""
        self._write(JsonRpcRequest(method=method, params=params or {}))

    def send(self, method: str, params: dict[str, Any] | None = None) -> JsonRpcResponse:
        """Send a request and read its response."""
        self._write(JsonRpcRequest(method=method, params=params or {}, id=self.next_id()))

        response_line = self._process.stdout.readline()
        if not response_line:
            code = self._process.poll()
            raise RuntimeError(f"Tool server process exited (code {code}) without a response")

        return JsonRpcResponse.from_json(response_line.strip())

    def _write(self, request: JsonRpcRequest) -> None:
        if not self.is_alive():
            raise RuntimeError("Transport not running. Call start() first.")
        self._process.stdin.write(request.to_json() + "\n")
        self._process.stdin.flush()

    def next_id(self) -> int:
        """Generate the next request ID."""
        self._request_id += 1
        return self._request_id
