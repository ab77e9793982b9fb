"""
Component templates and the store that holds them.

A template is a pure function (config, params) -> source text. The same
inputs always produce the same text; nothing here reads the clock or the
file system. params carries:

    name         component name (PascalCase)
    props        list of {"name", "type", "optional"?, "description"?}
    description  free-text component description

The only conditional inside a template is the class-naming strategy:
utility classes when config.styling is "tailwind", semantic class names
otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from string import Template as _Text
from typing import Any, Callable

from tool_servers.config import ProjectConfig
from tool_servers.errors import NotFound

RenderFn = Callable[[ProjectConfig, dict[str, Any]], str]


@dataclass(frozen=True)
class Template:
    """A named, versioned component template."""

    id: str
    name: str
    version: str
    description: str
    tags: tuple[str, ...]
    dependencies: tuple[str, ...]
    render: RenderFn

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on id, name, description and tags."""
        needle = query.lower()
        haystacks = (self.id, self.name, self.description, *self.tags)
        return any(needle in h.lower() for h in haystacks)


class TemplateStore:
    """Templates by id, kept in registration order."""

    def __init__(self, templates: list[Template] | None = None):
        self._templates: dict[str, Template] = {}
        for template in templates or []:
            self.register(template)

    def register(self, template: Template) -> None:
        if template.id in self._templates:
            raise ValueError(f"Template already registered: '{template.id}'")
        self._templates[template.id] = template

    def get(self, template_id: str) -> Template:
        template = self._templates.get(template_id)
        if template is None:
            raise NotFound(
                f"Template {template_id} not found. Available: {list(self._templates)}"
            )
        return template

    def list(self) -> list[Template]:
        return list(self._templates.values())

    def search(self, query: str) -> list[Template]:
        return [t for t in self._templates.values() if t.matches(query)]

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates


def _classes(config: ProjectConfig, utility: str, semantic: str) -> str:
    return utility if config.styling == "tailwind" else semantic


# ── Component templates ────────────────────────────────────────────────

_MINIMAL = _Text("""\
import React from 'react';

$interface

/**
 * $name component
 * @description $description
 */
export const $name: React.FC<${name}Props> = ({ $destructured }) => {
  return (
    <div
      className="$container_class"
      data-testid="$test_id"
      role="region"
      aria-label="$name"
    >
      <h2 className="$title_class">
        {$heading}
      </h2>
      <p className="$text_class">
        This is the $name component.
      </p>
    </div>
  );
};

$name.displayName = '$name';

export default $name;
""")


def _props_interface(name: str, props: list[dict[str, Any]]) -> str:
    if not props:
        return f"interface {name}Props {{}}"
    lines = []
    for prop in props:
        if prop.get("description"):
            lines.append(f"  /** {prop['description']} */")
        marker = "?" if prop.get("optional") else ""
        lines.append(f"  {prop['name']}{marker}: {prop['type']};")
    return f"interface {name}Props {{\n" + "\n".join(lines) + "\n}"


def render_minimal(config: ProjectConfig, params: dict[str, Any]) -> str:
    name = params["name"]
    props = params.get("props") or []
    prop_names = [p["name"] for p in props]
    return _MINIMAL.substitute(
        name=name,
        interface=_props_interface(name, props),
        description=params.get("description") or "A reusable component",
        destructured=", ".join(prop_names),
        test_id=name.lower(),
        heading="title" if "title" in prop_names else f"'{name}'",
        container_class=_classes(config, "p-4 border rounded-lg", "component-container"),
        title_class=_classes(config, "text-xl font-semibold mb-2", "component-title"),
        text_class=_classes(config, "text-gray-600", "component-text"),
    )


_FORM = _Text(r"""import React, { useState } from 'react';

interface ${name}Props {
  onSubmit: (data: FormData) => void | Promise<void>;
  loading?: boolean;
  className?: string;
}

interface FormData {
  email: string;
  password: string;
}

export const $name: React.FC<${name}Props> = ({
  onSubmit,
  loading = false,
  className = ''
}) => {
  const [formData, setFormData] = useState<FormData>({
    email: '',
    password: ''
  });

  const [errors, setErrors] = useState<Record<string, string>>({});

  const handleSubmit = async (e: React.FormEvent) => {
    e.preventDefault();

    const newErrors: Record<string, string> = {};

    if (!formData.email) {
      newErrors.email = 'Email is required';
    } else if (!/\S+@\S+\.\S+/.test(formData.email)) {
      newErrors.email = 'Email is invalid';
    }

    if (!formData.password) {
      newErrors.password = 'Password is required';
    } else if (formData.password.length < 8) {
      newErrors.password = 'Password must be at least 8 characters';
    }

    if (Object.keys(newErrors).length > 0) {
      setErrors(newErrors);
      return;
    }

    setErrors({});
    await onSubmit(formData);
  };

  const handleChange = (field: keyof FormData, value: string) => {
    setFormData(prev => ({ ...prev, [field]: value }));
    if (errors[field]) {
      setErrors(prev => ({ ...prev, [field]: '' }));
    }
  };

  return (
    <form
      onSubmit={handleSubmit}
      className={`$form_class $${className}`}
      data-testid="$test_id"
    >
      <div>
        <label htmlFor="email" className="$label_class">
          Email Address
        </label>
        <input
          type="email"
          id="email"
          value={formData.email}
          onChange={(e) => handleChange('email', e.target.value)}
          className={`$input_class $${
            errors.email ? '$invalid_class' : '$valid_class'
          }`}
          aria-invalid={errors.email ? 'true' : 'false'}
        />
        {errors.email && (
          <p className="$error_class">{errors.email}</p>
        )}
      </div>

      <div>
        <label htmlFor="password" className="$label_class">
          Password
        </label>
        <input
          type="password"
          id="password"
          value={formData.password}
          onChange={(e) => handleChange('password', e.target.value)}
          className={`$input_class $${
            errors.password ? '$invalid_class' : '$valid_class'
          }`}
          aria-invalid={errors.password ? 'true' : 'false'}
        />
        {errors.password && (
          <p className="$error_class">{errors.password}</p>
        )}
      </div>

      <button
        type="submit"
        disabled={loading}
        className="$button_class"
      >
        {loading ? 'Submitting...' : 'Submit'}
      </button>
    </form>
  );
};

export default $name;
""")


def render_form(config: ProjectConfig, params: dict[str, Any]) -> str:
    name = params["name"]
    return _FORM.substitute(
        name=name,
        test_id=name.lower(),
        form_class=_classes(config, "space-y-4 max-w-md mx-auto", "form"),
        label_class=_classes(config, "block text-sm font-medium text-gray-700 mb-1", "form-label"),
        input_class=_classes(
            config, "w-full px-3 py-2 border rounded-md focus:ring-2 focus:ring-blue-500", "form-input"
        ),
        invalid_class=_classes(config, "border-red-500", "form-input--invalid"),
        valid_class=_classes(config, "border-gray-300", "form-input--valid"),
        error_class=_classes(config, "mt-1 text-sm text-red-600", "form-error"),
        button_class=_classes(
            config,
            "w-full px-4 py-2 bg-blue-600 text-white rounded-md hover:bg-blue-700 disabled:opacity-50",
            "form-submit",
        ),
    )


_LAYOUT = _Text("""\
import React, { ReactNode } from 'react';

interface ${name}Props {
  children: ReactNode;
  title?: string;
  description?: string;
  className?: string;
}

export const $name: React.FC<${name}Props> = ({
  children,
  title = 'Page Title',
  description = 'Page description',
  className = ''
}) => {
  return (
    <div className={`$page_class $${className}`} data-testid="$test_id">
      <header className="$header_class">
        <div className="$inner_class">
          <h1 className="$title_class">{title}</h1>
          {description && (
            <p className="$description_class">{description}</p>
          )}
        </div>
      </header>

      <main className="$main_class">
        {children}
      </main>

      <footer className="$footer_class">
        <div className="$footer_inner_class">
          <p>&copy; {new Date().getFullYear()} Your App. All rights reserved.</p>
        </div>
      </footer>
    </div>
  );
};

export default $name;
""")


def render_layout(config: ProjectConfig, params: dict[str, Any]) -> str:
    name = params["name"]
    return _LAYOUT.substitute(
        name=name,
        test_id=name.lower(),
        page_class=_classes(config, "min-h-screen bg-gray-50", "page"),
        header_class=_classes(config, "bg-white shadow-sm border-b", "page-header"),
        inner_class=_classes(config, "max-w-7xl mx-auto px-4 py-6", "page-header__inner"),
        title_class=_classes(config, "text-3xl font-bold text-gray-900", "page-title"),
        description_class=_classes(config, "mt-2 text-gray-600", "page-description"),
        main_class=_classes(config, "max-w-7xl mx-auto px-4 py-8", "page-main"),
        footer_class=_classes(config, "bg-gray-800 text-white py-8 mt-auto", "page-footer"),
        footer_inner_class=_classes(config, "max-w-7xl mx-auto px-4 text-center", "page-footer__inner"),
    )


# ── Companion artifacts ────────────────────────────────────────────────

def render_test(config: ProjectConfig, name: str) -> str:
    """Testing-library smoke test for the component's default render."""
    header = "import { describe, it, expect } from 'vitest';\n" if config.testing == "vitest" else ""
    return (
        f"{header}"
        "import React from 'react';\n"
        "import { render, screen } from '@testing-library/react';\n"
        f"import {{ {name} }} from './{name}';\n"
        "\n"
        f"describe('{name}', () => {{\n"
        "  it('renders without crashing', () => {\n"
        f"    render(<{name} />);\n"
        f"    expect(screen.getByTestId('{name.lower()}')).toBeInTheDocument();\n"
        "  });\n"
        "});\n"
    )


def render_story(name: str) -> str:
    return (
        "import type { Meta, StoryObj } from '@storybook/react';\n"
        f"import {{ {name} }} from './{name}';\n"
        "\n"
        f"const meta: Meta<typeof {name}> = {{\n"
        f"  title: 'Components/{name}',\n"
        f"  component: {name},\n"
        "};\n"
        "\n"
        "export default meta;\n"
        "type Story = StoryObj<typeof meta>;\n"
        "\n"
        "export const Default: Story = {\n"
        "  args: {},\n"
        "};\n"
    )


def render_index(name: str) -> str:
    return f"export {{ {name} }} from './{name}';\n"


BUILTIN_TEMPLATES = (
    Template(
        id="component-minimal",
        name="Minimal Component",
        version="1.0.0",
        description="Lightweight component with TypeScript support",
        tags=("component", "minimal"),
        dependencies=("react",),
        render=render_minimal,
    ),
    Template(
        id="component-form",
        name="Form Component",
        version="1.0.0",
        description="Form component with validation",
        tags=("component", "form"),
        dependencies=("react",),
        render=render_form,
    ),
    Template(
        id="layout-page",
        name="Page Layout",
        version="1.0.0",
        description="Full page layout with SEO",
        tags=("layout", "page"),
        dependencies=("react",),
        render=render_layout,
    ),
)


def builtin_store() -> TemplateStore:
    """A fresh store holding the built-in templates."""
    return TemplateStore(list(BUILTIN_TEMPLATES))
