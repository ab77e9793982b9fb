"""
Writes generated component files to disk.

Files are written one after another; a failed write stops the run and
leaves whatever was already written in place.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from tool_servers.config import ProjectConfig
from tool_servers.errors import GenerationFailed, InvalidArgument
from tool_servers.templates import TemplateStore, render_index, render_story, render_test

logger = logging.getLogger(__name__)

COMPONENT_NAME = re.compile(r"^[A-Z][A-Za-z0-9]*$")


class ComponentGenerator:
    """Renders a template plus its companion files into an output directory."""

    def __init__(self, config: ProjectConfig, store: TemplateStore):
        self.config = config
        self.store = store

    def output_location(self, name: str, output_dir: str | None = None) -> Path:
        if output_dir:
            return Path(output_dir)
        return Path(self.config.output_dir) / name

    def generate(
        self,
        template_id: str,
        name: str,
        *,
        props: list[dict[str, Any]] | None = None,
        description: str | None = None,
        output_dir: str | None = None,
        with_tests: bool = True,
        with_stories: bool = False,
    ) -> list[Path]:
        """
        Generate a component and its companion files.

        Returns:
            Written paths in order: component, test (if any), story (if any), index.

        Raises:
            NotFound: unknown template id
            InvalidArgument: name is not a PascalCase identifier
            GenerationFailed: a directory or file could not be written
        """
        template = self.store.get(template_id)
        if not COMPONENT_NAME.match(name):
            raise InvalidArgument(
                [f"name: must be a PascalCase identifier, got {name!r}"], "generate_component"
            )

        location = self.output_location(name, output_dir)
        params = {"name": name, "props": props or [], "description": description}

        artifacts = [(f"{name}.tsx", lambda: template.render(self.config, params))]
        if with_tests:
            artifacts.append((f"{name}.test.tsx", lambda: render_test(self.config, name)))
        if with_stories:
            artifacts.append((f"{name}.stories.tsx", lambda: render_story(name)))
        artifacts.append(("index.ts", lambda: render_index(name)))

        written: list[Path] = []
        try:
            location.mkdir(parents=True, exist_ok=True)
            for filename, render in artifacts:
                path = location / filename
                path.write_text(render(), encoding="utf-8")
                written.append(path)
        except OSError as e:
            logger.error(f"Generation of {name} failed after {len(written)} files: {e}")
            raise GenerationFailed(f"Failed to generate component: {e}") from e

        logger.info(f"Generated {name} from {template_id}: {[str(p) for p in written]}")
        return written
