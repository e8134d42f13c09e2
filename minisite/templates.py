"""Template rendering engine for minisite.

This module uses Jinja2 to render documents that declare a ``template``.
An engine instance is a render function: call it with a template context.

Key items:
- TemplateEngine: Jinja2 environment bound to a template directory.
- markdown_filter: The ``markdown`` filter, backed by mistune.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import mistune
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

_markdown = mistune.create_markdown(
    escape=False, plugins=["strikethrough", "footnotes", "table", "url"]
)


def markdown_filter(value: Any) -> Any:
    """Render Markdown to HTML.

    Empty strings and None pass through so templates can apply the filter
    to optional fields.

    Args:
        value: Markdown source.

    Returns:
        Markup-safe HTML, or ``value`` unchanged when it is falsy.
    """
    if not value:
        return value
    return Markup(_markdown(str(value)))


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        template_dir: Directory templates are loaded from.
        env: Jinja2 environment.
    """

    def __init__(self, template_dir: Path | str = "template", markdown=None):
        """Initialize the template engine.

        Args:
            template_dir: Directory with templates.
            markdown: Optional replacement for the ``markdown`` filter.
        """
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            auto_reload=True,
        )
        self.env.filters["markdown"] = markdown or markdown_filter

    def __call__(self, context: Mapping[str, Any]) -> str:
        """Render a document from its context.

        Args:
            context: Template context; ``context["page"]`` is the document.

        Returns:
            Rendered output, or the page body when it declares no template.
        """
        page = context["page"]
        template = page.get("template")
        if not template:
            return page.body or ""
        return self.env.get_template(str(template)).render(**context)

    def render_string(self, template: str, context: Mapping[str, Any]) -> str:
        """Render a template string.

        Args:
            template: Template string to render.
            context: Variables to make available in the template.

        Returns:
            Rendered string.
        """
        return self.env.from_string(template).render(**context)
