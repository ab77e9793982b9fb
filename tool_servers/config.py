"""
Project configuration for the component generator.

The configuration lives in a single JSON file (vibe.config.json by default)
next to the project. Missing or unreadable files fall back to defaults;
files that parse but hold invalid values are reported as ConfigError.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tool_servers.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "vibe.config.json"


class ProjectConfig(BaseModel):
    """Generator settings, stored with camelCase keys on disk."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    framework: Literal["react", "next", "vite"] = "react"
    styling: Literal["tailwind", "styled-components", "css-modules", "emotion"] = "tailwind"
    typescript: bool = True
    testing: Literal["jest", "vitest", "none"] = "vitest"
    storybook: bool = False
    output_dir: str = Field(default="./src/components", alias="outputDir")
    eslint: bool = True
    prettier: bool = True

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ConfigManager:
    """Reads and writes the persisted ProjectConfig."""

    def __init__(self, path: str | Path = DEFAULT_CONFIG_PATH):
        self.path = Path(path)

    def _read_raw(self) -> dict[str, Any]:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No config at {self.path}, using defaults")
            return {}
        except OSError as e:
            logger.warning(f"Could not read {self.path}: {e}; using defaults")
            return {}

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Config {self.path} is not valid JSON ({e}); using defaults")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Config {self.path} is not a JSON object; using defaults")
            return {}
        return data

    def load(self) -> ProjectConfig:
        """
        Load the configuration, defaults filled in per field.

        Raises:
            ConfigError: the file holds a value outside the allowed options.
        """
        return _validate(self._read_raw(), self.path)

    def save(self, changes: dict[str, Any]) -> ProjectConfig:
        """Merge changes over the current configuration and write it in full."""
        fields = ProjectConfig.model_fields
        changes = {
            (fields[key].alias or key) if key in fields else key: value
            for key, value in changes.items()
        }
        merged = {**self.load().to_json_dict(), **changes}
        config = _validate(merged, self.path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(config.to_json_dict(), indent=2), encoding="utf-8")
        logger.info(f"Saved config to {self.path}")
        return config


def _validate(data: dict[str, Any], path: Path) -> ProjectConfig:
    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration in {path}: {problems}") from e
