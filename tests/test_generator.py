"""Tests for writing generated components to disk."""

from __future__ import annotations

import pytest

from tool_servers.config import ProjectConfig
from tool_servers.errors import GenerationFailed, InvalidArgument, NotFound
from tool_servers.generator import ComponentGenerator
from tool_servers.templates import builtin_store


@pytest.fixture
def generator(config: ProjectConfig) -> ComponentGenerator:
    return ComponentGenerator(config, builtin_store())


class TestGenerate:
    """File layout and ordering of generated artifacts."""

    def test_default_location_and_order(self, generator: ComponentGenerator, tmp_path) -> None:
        """Primary first, index last, everything under {outputDir}/{name}."""
        location = tmp_path / "components" / "UserCard"

        paths = generator.generate("component-minimal", "UserCard", with_tests=True, with_stories=True)

        assert [p.name for p in paths] == [
            "UserCard.tsx", "UserCard.test.tsx", "UserCard.stories.tsx", "index.ts",
        ]
        assert all(p.parent == location for p in paths)
        assert all(p.is_file() for p in paths)

    def test_tests_and_stories_optional(self, generator: ComponentGenerator) -> None:
        paths = generator.generate("layout-page", "MainLayout", with_tests=False)
        assert [p.name for p in paths] == ["MainLayout.tsx", "index.ts"]

    def test_explicit_output_dir(self, generator: ComponentGenerator, tmp_path) -> None:
        target = tmp_path / "elsewhere"
        paths = generator.generate("component-form", "LoginForm", output_dir=str(target))
        assert paths[0] == target / "LoginForm.tsx"
        assert paths[-1] == target / "index.ts"

    def test_existing_directory_is_fine(self, generator: ComponentGenerator, tmp_path) -> None:
        target = tmp_path / "existing"
        target.mkdir()
        generator.generate("component-minimal", "Badge", output_dir=str(target))
        assert (target / "Badge.tsx").is_file()

    def test_file_contents(self, generator: ComponentGenerator) -> None:
        props = [{"name": "title", "type": "string"}]
        paths = generator.generate(
            "component-minimal", "UserCard", props=props, description="Shows a user",
        )
        primary = paths[0].read_text(encoding="utf-8")
        assert "@description Shows a user" in primary
        assert "title: string;" in primary
        assert paths[1].read_text(encoding="utf-8").count("UserCard") >= 3
        assert paths[-1].read_text(encoding="utf-8") == "export { UserCard } from './UserCard';\n"

    def test_unknown_template(self, generator: ComponentGenerator, tmp_path) -> None:
        with pytest.raises(NotFound):
            generator.generate("component-carousel", "Slides")
        assert not (tmp_path / "components").exists()

    def test_name_must_be_pascal_case(self, generator: ComponentGenerator) -> None:
        with pytest.raises(InvalidArgument, match="PascalCase"):
            generator.generate("component-minimal", "../escape")

    def test_write_failure(self, generator: ComponentGenerator, tmp_path) -> None:
        """A file where the directory should be aborts with GenerationFailed."""
        blocker = tmp_path / "blocked"
        blocker.write_text("not a directory", encoding="utf-8")

        with pytest.raises(GenerationFailed, match="Failed to generate component") as exc_info:
            generator.generate("component-minimal", "Badge", output_dir=str(blocker))
        assert isinstance(exc_info.value.__cause__, OSError)
