"""
BAML backend: renders a TranslationContext to BAML source text.

The output is deterministic for a given context, which keeps the build cache
key stable across runs of the same schema.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

from ..analyzer.ir_nodes import ClassType, FieldDef, TranslationContext
from ..config import TranslatorConfig
from ..utils import paren_if_union, quote


class BamlBackend:
    """Renders translated schemas as a BAML source file."""

    TEMPLATE_NAME = "schema.baml.jinja2"

    def __init__(self, config: TranslatorConfig | None = None):
        """
        Initialize the backend.

        Args:
            config: Translator configuration (provides the function client)
        """
        self.config = config or TranslatorConfig()
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent / "templates"
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.jinja_env.filters["quote"] = quote
        self.schema_template = self.jinja_env.get_template(self.TEMPLATE_NAME)

    def render(self, context: TranslationContext, function_name: str, root_type: str) -> str:
        """
        Render the declarations of a context and the parse function.

        Enums come first, then aliases, then classes in declaration order.

        Args:
            context: The filled translation context
            function_name: Name of the generated parse function
            root_type: BAML return type of the parse function

        Returns:
            BAML source text
        """
        return self.schema_template.render(self._prepare_context(context, function_name, root_type))

    def _prepare_context(self, context: TranslationContext, function_name: str, root_type: str) -> dict[str, Any]:
        return {
            "enums": list(context.enums.items()),
            "aliases": list(context.aliases.items()),
            "classes": [self._prepare_class_context(context.classes[name]) for name in context.order],
            "function_name": function_name,
            "root_type": root_type,
            "client": self.config.client,
        }

    def _prepare_class_context(self, class_type: ClassType) -> dict[str, Any]:
        return {
            "name": class_type.name,
            "lines": [self.field_line(f) for f in class_type.fields],
        }

    def field_line(self, field: FieldDef) -> str:
        """Render one class field: `name type[?] [@alias("...")] [@description("...")]`."""
        type_expr = f"{paren_if_union(field.type)}?" if field.optional else field.type
        line = f"{field.name} {type_expr}"
        if field.alias:
            line += f" @alias({quote(field.alias)})"
        if field.description:
            line += f" @description({quote(field.description)})"
        return line
