"""
Schema AST module.

Contains the schema node definitions and the JSON Schema / pydantic parser.
"""

from __future__ import annotations

from .nodes import (
    ArrayNode,
    BrandedNode,
    CatchNode,
    DefaultNode,
    EffectsNode,
    EnumNode,
    LazyNode,
    LiteralNode,
    ModifierNode,
    NativeEnumNode,
    NullableNode,
    ObjectNode,
    OptionalNode,
    PipelineNode,
    PrimitiveNode,
    ReadonlyNode,
    RecordNode,
    SchemaNode,
    UnionNode,
    element_of,
)
from .parser import SchemaParser, from_json_schema, from_pydantic, to_schema_node

__all__ = [
    "SchemaNode",
    "PrimitiveNode",
    "LiteralNode",
    "ObjectNode",
    "ArrayNode",
    "EnumNode",
    "NativeEnumNode",
    "RecordNode",
    "UnionNode",
    "LazyNode",
    "ModifierNode",
    "OptionalNode",
    "NullableNode",
    "DefaultNode",
    "CatchNode",
    "ReadonlyNode",
    "BrandedNode",
    "EffectsNode",
    "PipelineNode",
    "element_of",
    "SchemaParser",
    "from_json_schema",
    "from_pydantic",
    "to_schema_node",
]
