"""
Declared argument shapes and the validator that checks them.

A tool declares its arguments as an ordered tuple of Field descriptors:

    parameters = (
        Field("location", "string", description="City name", required=True),
        Field("days", "integer", default=5, minimum=1, maximum=5),
    )

validate_arguments() turns a raw argument bag into a normalized dict, or
raises InvalidArgument listing every offending field at once.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from tool_servers.errors import InvalidArgument

KINDS = ("string", "number", "integer", "boolean", "enum", "array", "object")

_MISSING = object()


@dataclass(frozen=True)
class Field:
    """One named argument of a tool."""

    name: str
    kind: str
    description: str = ""
    required: bool = False
    default: Any = None
    minimum: float | None = None
    maximum: float | None = None
    choices: tuple[str, ...] = ()
    items: tuple["Field", ...] = ()

    def __post_init__(self):
        if self.kind not in KINDS:
            raise ValueError(f"Field {self.name!r} has unknown kind {self.kind!r}")
        if self.kind == "enum" and not self.choices:
            raise ValueError(f"Enum field {self.name!r} declares no choices")

    def to_schema(self) -> dict:
        """JSON-schema rendition used for tool discovery."""
        if self.kind == "enum":
            schema: dict[str, Any] = {"type": "string", "enum": list(self.choices)}
        elif self.kind == "array":
            schema = {"type": "array"}
            if self.items:
                schema["items"] = object_schema(self.items)
        else:
            schema = {"type": self.kind}
        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self.default
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


def object_schema(fields: tuple[Field, ...]) -> dict:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {f.name: f.to_schema() for f in fields},
    }
    required = [f.name for f in fields if f.required]
    if required:
        schema["required"] = required
    return schema


def validate_arguments(
    fields: tuple[Field, ...],
    raw: Any,
    tool: str | None = None,
) -> dict[str, Any]:
    """
    Check a raw argument bag against declared fields.

    Args:
        fields: The declared argument shape
        raw: Argument bag as received (None is treated as empty)
        tool: Tool name, used in the error message

    Returns:
        Normalized arguments: defaults applied, unambiguous coercions done,
        unknown fields dropped.

    Raises:
        InvalidArgument: listing every violation found.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise InvalidArgument(
            [f"arguments must be an object, got {type(raw).__name__}"], tool
        )

    violations: list[str] = []
    normalized = _check_fields(fields, raw, "", violations)
    if violations:
        raise InvalidArgument(violations, tool)
    return normalized


def _check_fields(
    fields: tuple[Field, ...],
    raw: dict,
    prefix: str,
    violations: list[str],
) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for field in fields:
        label = f"{prefix}{field.name}"
        value = raw.get(field.name, _MISSING)

        if value is _MISSING or value is None:
            if field.required:
                violations.append(f"{label}: required")
            elif field.default is not None:
                normalized[field.name] = field.default
            continue

        ok, coerced = _coerce(field, value, label, violations)
        if not ok:
            continue

        if field.kind in ("number", "integer"):
            if field.minimum is not None and coerced < field.minimum:
                violations.append(f"{label}: must be >= {_fmt(field.minimum)}, got {coerced}")
                continue
            if field.maximum is not None and coerced > field.maximum:
                violations.append(f"{label}: must be <= {_fmt(field.maximum)}, got {coerced}")
                continue

        normalized[field.name] = coerced
    return normalized


def _coerce(field: Field, value: Any, label: str, violations: list[str]) -> tuple[bool, Any]:
    kind = field.kind

    if kind == "string":
        if isinstance(value, str):
            return True, value

    elif kind == "enum":
        if isinstance(value, str) and value in field.choices:
            return True, value
        violations.append(f"{label}: must be one of {list(field.choices)}, got {value!r}")
        return False, None

    elif kind == "boolean":
        if isinstance(value, bool):
            return True, value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return True, value.lower() == "true"

    elif kind == "number":
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                pass
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if not math.isfinite(value):
                violations.append(f"{label}: must be a finite number, got {value!r}")
                return False, None
            return True, value

    elif kind == "integer":
        if isinstance(value, int) and not isinstance(value, bool):
            return True, value
        if isinstance(value, float) and value.is_integer():
            return True, int(value)
        if isinstance(value, str):
            try:
                return True, int(value)
            except ValueError:
                pass

    elif kind == "object":
        if isinstance(value, dict):
            return True, value

    elif kind == "array":
        if isinstance(value, list):
            if not field.items:
                return True, list(value)
            before = len(violations)
            elements = []
            for index, element in enumerate(value):
                element_label = f"{label}[{index}]"
                if not isinstance(element, dict):
                    violations.append(f"{element_label}: expected object")
                    continue
                elements.append(
                    _check_fields(field.items, element, f"{element_label}.", violations)
                )
            return len(violations) == before, elements

    violations.append(f"{label}: expected {kind}, got {type(value).__name__}")
    return False, None


def _fmt(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)
