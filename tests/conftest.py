"""Pytest configuration and fixtures for tool_servers tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from tool_servers.config import ConfigManager, ProjectConfig


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock requests Session."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def config(tmp_path) -> ProjectConfig:
    """Default configuration writing components under tmp_path."""
    return ProjectConfig(outputDir=str(tmp_path / "components"))


@pytest.fixture
def config_manager(tmp_path) -> ConfigManager:
    return ConfigManager(tmp_path / "vibe.config.json")


def create_mock_response(
    status: int = 200,
    json_data: Any = None,
    reason: str = "OK",
) -> MagicMock:
    """Create a configured mock requests Response.

    Args:
        status: HTTP status code
        json_data: Data to return from json() call
        reason: HTTP reason phrase

    Returns:
        Configured MagicMock response
    """
    response = MagicMock(spec=requests.Response)
    response.status_code = status
    response.ok = 200 <= status < 300
    response.reason = reason
    response.json.return_value = json_data
    return response


def current_payload(**overrides: Any) -> dict[str, Any]:
    """Provider payload for /weather."""
    payload: dict[str, Any] = {
        "name": "London",
        "sys": {"country": "GB"},
        "main": {"temp": 15.5, "feels_like": 14.4, "humidity": 72, "pressure": 1012},
        "wind": {"speed": 4.12, "deg": 250},
        "weather": [{"main": "Clouds", "description": "broken clouds", "icon": "04d"}],
        "visibility": 8000,
    }
    payload.update(overrides)
    return payload


def forecast_sample(
    dt_txt: str,
    temp: float,
    *,
    humidity: int = 50,
    wind: float = 2.0,
    pop: float | None = 0.0,
    condition: str = "Clear",
    description: str = "clear sky",
    icon: str = "01d",
) -> dict[str, Any]:
    """One 3-hourly sample of the /forecast payload."""
    sample: dict[str, Any] = {
        "dt_txt": dt_txt,
        "main": {"temp": temp, "humidity": humidity},
        "wind": {"speed": wind},
        "weather": [{"main": condition, "description": description, "icon": icon}],
    }
    if pop is not None:
        sample["pop"] = pop
    return sample


def forecast_payload(samples: list[dict[str, Any]]) -> dict[str, Any]:
    return {"city": {"name": "London", "country": "GB"}, "list": samples}
