"""
Schema translator that turns schema nodes into BAML type expressions.

Phase 2 of the pipeline: walk the schema recursively, declare classes, enums
and type aliases in a TranslationContext, and return the BAML type
expression of the root.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..config import TranslatorConfig
from ..errors import TranslationError, UnsupportedTypeError
from ..schema_ast.nodes import (
    ArrayNode,
    EnumNode,
    LazyNode,
    LiteralNode,
    ModifierNode,
    NativeEnumNode,
    NullableNode,
    ObjectNode,
    OptionalNode,
    PrimitiveNode,
    RecordNode,
    SchemaNode,
    UnionNode,
    element_of,
)
from ..utils import is_identifier, paren_if_union, quote, to_field_name
from .ir_nodes import ClassType, FieldDef, TranslationContext


@dataclass
class Unwrapped:
    """A node with its modifier wrappers peeled off."""

    node: SchemaNode
    optional: bool = False
    nullable: bool = False
    description: str | None = None


class BamlTranslator:
    """Translates schema nodes to BAML types."""

    # Schema primitive -> BAML primitive
    TYPE_MAP = {
        "string": "string",
        "boolean": "bool",
        "integer": "int",
        "number": "float",
        "null": "null",
    }

    def __init__(self, config: TranslatorConfig | None = None):
        """
        Initialize the translator.

        Args:
            config: Translator configuration
        """
        self.config = config or TranslatorConfig()

    def unwrap(self, node: SchemaNode) -> Unwrapped:
        """
        Peel modifier wrappers off a node.

        Optional and Nullable set their flags; every other modifier passes
        through to its inner node. The first description met, outermost
        first, is kept.

        Raises:
            TranslationError: If more than `unwrap_limit` wrappers are stacked
        """
        optional = False
        nullable = False
        description = None
        for _ in range(self.config.unwrap_limit + 1):
            if not isinstance(node, SchemaNode):
                raise UnsupportedTypeError(type(node).__name__)
            if description is None and node.description:
                description = node.description
            if not isinstance(node, ModifierNode):
                return Unwrapped(node=node, optional=optional, nullable=nullable, description=description)
            if isinstance(node, OptionalNode):
                optional = True
            elif isinstance(node, NullableNode):
                nullable = True
            if node.target is None:
                raise TranslationError(f"{node.kind} does not wrap any node")
            node = node.target
        raise TranslationError(f"More than {self.config.unwrap_limit} modifier wrappers around a schema node")

    def translate(self, node: SchemaNode, context: TranslationContext, name_hint: str | None = None) -> str:
        """
        Translate a schema node to a BAML type expression.

        Args:
            node: The schema node
            context: Context receiving the declarations
            name_hint: Preferred name for a declared class, enum or alias

        Returns:
            BAML type expression
        """
        unwrapped = self.unwrap(node)
        expr = self._translate_base(unwrapped.node, context, name_hint)
        if unwrapped.nullable and expr != "null":
            return f"{paren_if_union(expr)} | null"
        return expr

    def _translate_base(self, node: SchemaNode, context: TranslationContext, name_hint: str | None) -> str:
        if isinstance(node, ObjectNode):
            class_type = context.declare_class(name_hint or "Obj")
            return self._translate_object(node, context, class_type)
        if isinstance(node, PrimitiveNode):
            if node.type_name not in self.TYPE_MAP:
                raise UnsupportedTypeError(f"primitive {node.type_name!r}")
            return self.TYPE_MAP[node.type_name]
        if isinstance(node, LiteralNode):
            return self._literal_type(node.value)
        if isinstance(node, ArrayNode):
            return self._translate_array(node, context, name_hint)
        if isinstance(node, (EnumNode, NativeEnumNode)):
            return self._translate_enum(node.values, context, name_hint)
        if isinstance(node, RecordNode):
            return self._translate_record(node, context, name_hint)
        if isinstance(node, UnionNode):
            return self._translate_union(node, context, name_hint)
        if isinstance(node, LazyNode):
            return self._translate_lazy(node, context, name_hint)

        inner = getattr(node, "inner", None)
        if isinstance(inner, SchemaNode):
            return self.translate(inner, context, name_hint)
        raise UnsupportedTypeError(node.kind)

    def _translate_object(self, node: ObjectNode, context: TranslationContext, class_type: ClassType) -> str:
        """Translate the fields of an object into an already declared class.

        Keys that are not BAML identifiers get a sanitized name and keep the
        original key as an alias.
        """
        used = set()
        for key, field_node in node.fields.items():
            unwrapped = self.unwrap(field_node)
            field_type = self.translate(field_node, context, f"{class_type.name}_{key}")
            name = to_field_name(key)
            base, suffix = name, 1
            while name in used:
                name = f"{base}_{suffix}"
                suffix += 1
            used.add(name)
            class_type.fields.append(
                FieldDef(
                    name=name,
                    type=field_type,
                    optional=unwrapped.optional,
                    description=unwrapped.description,
                    alias=key if name != key else None,
                )
            )
        context.complete_class(class_type)
        return class_type.name

    def _literal_type(self, value) -> str:
        """A literal is typed by its underlying primitive."""
        if isinstance(value, bool):
            return "bool"
        if isinstance(value, int):
            return "int"
        if isinstance(value, float):
            return "int" if value.is_integer() else "float"
        return "string"

    def _translate_array(self, node: ArrayNode, context: TranslationContext, name_hint: str | None) -> str:
        element = element_of(node)
        if element is None:
            inner = "string"
        else:
            inner = self.translate(element, context, f"{name_hint}Item" if name_hint else None)
        return f"{paren_if_union(inner)}[]"

    def _translate_enum(self, values: list[str], context: TranslationContext, name_hint: str | None) -> str:
        """Identifier-safe values become an enum, anything else a literal union alias."""
        if not values:
            return "string"
        if all(is_identifier(v) for v in values):
            return context.declare_enum(name_hint or "Enum", values)
        return context.declare_alias(name_hint or "Enum", " | ".join(quote(v) for v in values))

    def _translate_record(self, node: RecordNode, context: TranslationContext, name_hint: str | None) -> str:
        if node.value is None:
            raise TranslationError("RecordNode has no value schema")
        key_node = node.key if node.key is not None else PrimitiveNode(type_name="string")
        key = self.translate(key_node, context, f"{name_hint}Key" if name_hint else None)
        value = self.translate(node.value, context, f"{name_hint}Val" if name_hint else None)
        return f"map<{key}, {value}>"

    def _translate_union(self, node: UnionNode, context: TranslationContext, name_hint: str | None) -> str:
        if not node.options:
            raise TranslationError("UnionNode has no options")
        parts = [self.translate(option, context, f"{name_hint}U{i}" if name_hint else None) for i, option in enumerate(node.options)]
        return " | ".join(parts)

    def _translate_lazy(self, node: LazyNode, context: TranslationContext, name_hint: str | None) -> str:
        """
        Resolve a lazy node.

        Every target is declared once per LazyNode and referenced by its
        expression afterwards. Objects are registered before their fields are
        translated, which terminates self-referential schemas. Any other
        target counts against `max_lazy_depth` while it is being translated.
        """
        key = id(node)
        if key in context.lazy_refs:
            return context.lazy_refs[key]

        hint = node.name or name_hint
        resolved = node.resolve()
        target = self.unwrap(resolved)
        if isinstance(target.node, ObjectNode):
            class_type = context.declare_class(hint or "Obj")
            expr = f"{class_type.name} | null" if target.nullable else class_type.name
            context.lazy_refs[key] = expr
            self._translate_object(target.node, context, class_type)
            return expr

        if context.lazy_depth >= self.config.max_lazy_depth:
            raise TranslationError(f"Lazy schema nested deeper than {self.config.max_lazy_depth} levels (recursive non-object schema?)")
        context.lazy_depth += 1
        try:
            expr = self.translate(resolved, context, hint)
        finally:
            context.lazy_depth -= 1
        context.lazy_refs[key] = expr
        return expr
