"""
TSX component generator tool server.

Generates React components from built-in templates into the project's
component directory, configured by vibe.config.json.

Launch:
    python -m tool_servers.servers.tsx_generator

Test manually:
    echo '{"jsonrpc":"2.0","method":"tools/call","params":{"name":"list_templates","arguments":{}},"id":1}' | python -m tool_servers.servers.tsx_generator
"""

from __future__ import annotations

import logging
import os
import sys

from tool_servers.config import DEFAULT_CONFIG_PATH, ConfigManager, ProjectConfig
from tool_servers.errors import ConfigError
from tool_servers.generator import ComponentGenerator
from tool_servers.schema import Field
from tool_servers.server import StdioToolServer, ToolHandler, configure_logging
from tool_servers.templates import TemplateStore, builtin_store

logger = logging.getLogger(__name__)

SERVER_NAME = "vibe-tsx-generator"
SERVER_VERSION = "1.0.0"
CONFIG_PATH_ENV = "VIBE_CONFIG_PATH"

PROP_FIELDS = (
    Field("name", "string", required=True),
    Field("type", "string", required=True),
    Field("optional", "boolean"),
    Field("description", "string"),
)


class GenerateComponentTool(ToolHandler):
    name = "generate_component"
    description = "Generate a new TSX component with production-ready features"
    failure_message = "Failed to generate component"
    parameters = (
        Field("template", "string", required=True,
              description="Template ID (e.g., component-minimal, component-form)"),
        Field("name", "string", required=True, description="Component name in PascalCase"),
        Field("props", "array", items=PROP_FIELDS, description="Component props definition"),
        Field("outputDir", "string", description="Output directory (defaults to config)"),
        Field("description", "string", description="Component description"),
        Field("withTests", "boolean", default=True, description="Generate test files"),
        Field("withStories", "boolean", default=False, description="Generate Storybook stories"),
    )

    def __init__(self, generator: ComponentGenerator):
        self.generator = generator

    def handle(self, args: dict) -> str:
        files = self.generator.generate(
            args["template"],
            args["name"],
            props=args.get("props"),
            description=args.get("description"),
            output_dir=args.get("outputDir"),
            with_tests=args["withTests"],
            with_stories=args["withStories"],
        )
        listing = "\n".join(f"  • {f}" for f in files)
        return (
            f"✅ Successfully generated {args['name']} component!\n\n"
            f"Template: {args['template']}\n"
            f"Files created: {len(files)}\n\n"
            f"Files:\n{listing}\n\n"
            "Features included:\n"
            "  • TypeScript interfaces and proper typing\n"
            "  • Accessibility features (ARIA labels, semantic HTML)\n"
            f"  • {'Unit tests' if args['withTests'] else 'No tests'}\n"
            f"  • {'Storybook stories' if args['withStories'] else 'No stories'}"
        )


class ListTemplatesTool(ToolHandler):
    name = "list_templates"
    description = "List available component templates"
    failure_message = "Failed to list templates"
    parameters = (
        Field("search", "string", description="Search query"),
    )

    def __init__(self, store: TemplateStore):
        self.store = store

    def handle(self, args: dict) -> str:
        query = args.get("search")
        templates = self.store.search(query) if query else self.store.list()
        entries = "\n".join(
            f"**{t.id}** (v{t.version})\n"
            f"  {t.description}\n"
            f"  Tags: {', '.join(t.tags)}\n"
            for t in templates
        )
        return (
            f"📋 Available Templates ({len(templates)}):\n\n"
            f"{entries}\n"
            "💡 Use generate_component with any template ID."
        )


class ProjectInfoTool(ToolHandler):
    name = "get_project_info"
    description = "Get information about the current project"
    failure_message = "Failed to get project info"

    def __init__(self, config_manager: ConfigManager):
        self.config_manager = config_manager

    def handle(self, args: dict) -> str:
        config = self.config_manager.load()
        return (
            "🏗️ Project Configuration:\n\n"
            f"  • Framework: {config.framework}\n"
            f"  • Styling: {config.styling}\n"
            f"  • TypeScript: {str(config.typescript).lower()}\n"
            f"  • Testing: {config.testing}\n"
            f"  • Output Directory: {config.output_dir}\n"
        )


def build_server(
    config_manager: ConfigManager | None = None,
    store: TemplateStore | None = None,
) -> StdioToolServer:
    """Wire the generator tools around one config manager and template store."""
    config_manager = config_manager or ConfigManager(
        os.environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH)
    )
    store = store if store is not None else builtin_store()

    try:
        config = config_manager.load()
    except ConfigError as e:
        logger.warning(f"{e}; generating with default configuration")
        config = ProjectConfig()

    server = StdioToolServer(SERVER_NAME, SERVER_VERSION)
    server.register(GenerateComponentTool(ComponentGenerator(config, store)))
    server.register(ListTemplatesTool(store))
    server.register(ProjectInfoTool(config_manager))
    return server


def main() -> int:
    configure_logging()
    try:
        server = build_server()
        return server.run()
    except OSError as e:
        logger.error(f"Server error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
