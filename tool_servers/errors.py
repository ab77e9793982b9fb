"""
Error types shared by the tool servers.

Every error a tool can raise derives from ToolError and carries the
JSON-RPC error code the stdio server reports when the error crosses the
protocol boundary.
"""

from __future__ import annotations

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000


class ToolError(Exception):
    """Base error for tool failures."""

    code: int = SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(ToolError):
    """Unknown template, location or other named resource."""

    code = INVALID_PARAMS


class MethodNotFound(ToolError):
    """Unknown tool or protocol method."""

    code = METHOD_NOT_FOUND


class InvalidArgument(ToolError):
    """Argument validation failed. Lists every violation, not just the first."""

    code = INVALID_PARAMS

    def __init__(self, violations: list[str], tool: str | None = None) -> None:
        self.violations = list(violations)
        self.tool = tool
        prefix = f"Invalid arguments for {tool}" if tool else "Invalid arguments"
        super().__init__(f"{prefix}: " + "; ".join(self.violations))


class InternalError(ToolError):
    """Unexpected exception raised inside a tool handler."""

    code = INTERNAL_ERROR


class GenerationFailed(ToolError):
    """Writing a generated artifact failed."""

    code = INVALID_REQUEST


class ConfigError(ToolError):
    """Persisted project configuration holds an invalid value."""

    code = INTERNAL_ERROR


class WeatherError(ToolError):
    """Base error for weather provider failures."""


class Unauthorized(WeatherError):
    """The provider rejected the API key."""


class LocationNotFound(WeatherError, NotFound):
    """The provider does not know the queried location."""

    def __init__(self, location: str, hint: str | None = None) -> None:
        message = f"Location not found: {location}."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)
        self.location = location


class ExternalServiceError(WeatherError):
    """Non-2xx response (or no response at all) from the provider."""

    def __init__(self, status: int, reason: str) -> None:
        super().__init__(f"Weather API error: {status} {reason}".rstrip())
        self.status = status
        self.reason = reason


class ToolServerError(Exception):
    """A tool server answered a client request with a JSON-RPC error."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message
