"""
JSON hints for the text generation prompt.

The structure description is a TypeScript-like notation aimed at the model,
not the BAML compiler.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .schema_ast.nodes import (
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
from .utils import paren_if_union, quote

HINT_TEMPLATE = "You are to output ONLY valid JSON with no extra text. The JSON must match the following structure: {structure}."

PRIMITIVE_NAMES = {
    "string": "string",
    "integer": "number",
    "number": "number",
    "boolean": "boolean",
    "null": "null",
}


def build_json_hint(node: SchemaNode) -> str:
    """Wrap the structure description in a JSON-only instruction."""
    return HINT_TEMPLATE.format(structure=describe_schema(node))


def describe_schema(node: SchemaNode, _active: set[int] | None = None) -> str:
    """
    Describe a schema as an inline structure.

    Args:
        node: The schema node

    Returns:
        Description such as `{ id: number, tags: string[], nick?: string }`
    """
    active = set() if _active is None else _active

    if isinstance(node, OptionalNode):
        # Absence is shown by the `?` of the containing field
        return describe_schema(node.inner, active)
    if isinstance(node, NullableNode):
        return f"{describe_schema(node.inner, active)} | null"
    if isinstance(node, ModifierNode):
        return describe_schema(node.target, active) if node.target is not None else "unknown"

    if isinstance(node, ObjectNode):
        parts = [f"{key}{'?' if is_optional(value) else ''}: {describe_schema(value, active)}" for key, value in node.fields.items()]
        return "{ " + ", ".join(parts) + " }"
    if isinstance(node, PrimitiveNode):
        return PRIMITIVE_NAMES.get(node.type_name, "unknown")
    if isinstance(node, ArrayNode):
        element = element_of(node)
        inner = describe_schema(element, active) if element is not None else "string"
        return f"{paren_if_union(inner)}[]"
    if isinstance(node, (EnumNode, NativeEnumNode)):
        values = node.values
        return " | ".join(quote(v) for v in values) if values else "string"
    if isinstance(node, LiteralNode):
        return quote(node.value)
    if isinstance(node, UnionNode):
        return " | ".join(describe_schema(option, active) for option in node.options)
    if isinstance(node, RecordNode):
        value = describe_schema(node.value, active) if node.value is not None else "unknown"
        return f"{{ [key: string]: {value} }}"
    if isinstance(node, LazyNode):
        key = id(node)
        if key in active:
            return node.name or "object"
        active.add(key)
        try:
            return describe_schema(node.resolve(), active)
        finally:
            active.discard(key)
    return "unknown"


def is_optional(node: SchemaNode) -> bool:
    """Whether an OptionalNode appears in the wrapper chain of a node."""
    while isinstance(node, ModifierNode):
        if isinstance(node, OptionalNode):
            return True
        node = node.target
    return False


def merge_hint_into_prompt(hint: str, prompt: str) -> str:
    return f"{hint}\n\n{prompt}"


def merge_hint_into_messages(hint: str, messages: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """
    Put the hint in the leading system message.

    An existing leading system message gets the hint appended to its content;
    otherwise a new system message is inserted first. The input is not
    modified.

    Args:
        hint: The JSON hint
        messages: Role-tagged chat messages

    Returns:
        New message list
    """
    if not messages:
        return [{"role": "system", "content": hint}]
    first, rest = messages[0], [dict(m) for m in messages[1:]]
    if first.get("role") == "system":
        return [{**first, "content": f"{first.get('content', '')}\n\n{hint}"}, *rest]
    return [{"role": "system", "content": hint}, dict(first), *rest]
