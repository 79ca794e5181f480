"""
JSON Schema parser that builds schema nodes.

Accepts plain JSON Schema dictionaries (draft 7 / 2020-12 subset) and pydantic
model classes, which are converted through their JSON Schema.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from ..errors import UnsupportedTypeError
from .nodes import (
    ArrayNode,
    DefaultNode,
    EnumNode,
    LazyNode,
    LiteralNode,
    ModifierNode,
    NullableNode,
    ObjectNode,
    OptionalNode,
    PrimitiveNode,
    RecordNode,
    SchemaNode,
    UnionNode,
)


class SchemaParser:
    """Parses JSON Schema into schema nodes."""

    # Primitive type names
    PRIMITIVE_TYPES = {"string", "integer", "number", "boolean", "null"}

    # Local reference prefixes
    REF_PREFIXES = ("#/$defs/", "#/definitions/")

    def __init__(self):
        self.definitions: dict[str, Any] = {}
        # ref path -> shared LazyNode
        self._refs: dict[str, LazyNode] = {}
        # ref path -> parsed definition
        self._parsed_refs: dict[str, SchemaNode] = {}

    def parse(self, schema: dict[str, Any]) -> SchemaNode:
        """
        Parse a JSON Schema into a schema node.

        Args:
            schema: The JSON Schema dictionary

        Returns:
            The root SchemaNode
        """
        self.definitions = {**(schema.get("definitions") or {}), **(schema.get("$defs") or {})}
        self._refs = {}
        self._parsed_refs = {}
        return self._parse_schema_node(schema, "#")

    def _parse_schema_node(self, schema: dict[str, Any] | bool, path: str) -> SchemaNode:
        """
        Parse a schema node recursively.

        Args:
            schema: The schema dictionary
            path: Current path in schema (for error messages)

        Returns:
            Appropriate SchemaNode subclass
        """
        if not isinstance(schema, dict):
            raise UnsupportedTypeError(f"schema {schema!r}", path)

        if "$ref" in schema:
            node = self._parse_ref_node(schema, path)
        elif "const" in schema:
            node = LiteralNode(value=schema["const"])
        elif "enum" in schema:
            node = self._parse_enum_node(schema, path)
        elif "oneOf" in schema or "anyOf" in schema:
            node = self._parse_union_node(schema, path)
        elif "allOf" in schema:
            node = self._parse_allof_node(schema, path)
        elif "type" in schema:
            node = self._parse_type_node(schema, path)
        elif "properties" in schema:
            node = self._parse_object_node(schema, path)
        else:
            raise UnsupportedTypeError("untyped schema", path)

        if schema.get("description"):
            if isinstance(node, LazyNode):
                # The lazy node is shared by every reference, annotate this use only
                node = ModifierNode(inner=node, description=schema["description"])
            else:
                node.description = schema["description"]

        if "default" in schema:
            node = DefaultNode(inner=node, default=schema["default"], description=node.description)

        return node

    def _parse_ref_node(self, schema: dict[str, Any], path: str) -> LazyNode:
        """Parse a local $ref into a LazyNode shared by every use of the same target."""
        ref_path = schema["$ref"]
        if ref_path in self._refs:
            return self._refs[ref_path]

        name = None
        for prefix in self.REF_PREFIXES:
            if ref_path.startswith(prefix):
                name = ref_path[len(prefix) :]
                break
        if name is None or name not in self.definitions:
            raise UnsupportedTypeError(f"unresolvable $ref {ref_path}", path)

        def resolve() -> SchemaNode:
            if ref_path not in self._parsed_refs:
                self._parsed_refs[ref_path] = self._parse_schema_node(self.definitions[name], ref_path)
            return self._parsed_refs[ref_path]

        node = LazyNode(resolver=resolve, name=name)
        self._refs[ref_path] = node
        return node

    def _parse_enum_node(self, schema: dict[str, Any], path: str) -> SchemaNode:
        """Parse an enum; non-string values become a union of literals."""
        values = schema["enum"]
        if all(isinstance(v, str) for v in values):
            return EnumNode(values=list(values))
        return UnionNode(options=[LiteralNode(value=v) for v in values])

    def _parse_union_node(self, schema: dict[str, Any], path: str) -> SchemaNode:
        """Parse a oneOf or anyOf union node.

        A null alternative is lifted into a NullableNode around the rest.
        """
        union_type = "oneOf" if "oneOf" in schema else "anyOf"
        variants = []
        nullable = False
        for i, variant in enumerate(schema[union_type]):
            if isinstance(variant, dict) and variant.get("type") == "null" and len(variant) == 1:
                nullable = True
                continue
            variants.append(self._parse_schema_node(variant, f"{path}/{union_type}/{i}"))

        if not variants:
            return PrimitiveNode(type_name="null")
        node = variants[0] if len(variants) == 1 else UnionNode(options=variants)
        return NullableNode(inner=node) if nullable else node

    def _parse_allof_node(self, schema: dict[str, Any], path: str) -> SchemaNode:
        """Parse a single-element allOf (as emitted around annotated $refs)."""
        allof = schema["allOf"]
        if len(allof) != 1:
            raise UnsupportedTypeError("allOf with several schemas", path)
        return self._parse_schema_node(allof[0], f"{path}/allOf/0")

    def _parse_type_node(self, schema: dict[str, Any], path: str) -> SchemaNode:
        """Parse a type-based node."""
        type_value = schema["type"]

        # Handle array of types (union)
        if isinstance(type_value, list):
            return self._parse_type_union(schema, type_value, path)

        if type_value == "array":
            return self._parse_array_node(schema, path)

        if type_value == "object":
            return self._parse_object_node(schema, path)

        if type_value in self.PRIMITIVE_TYPES:
            return PrimitiveNode(type_name=type_value)

        raise UnsupportedTypeError(f"type {type_value!r}", path)

    def _parse_type_union(self, schema: dict[str, Any], types: list[str], path: str) -> SchemaNode:
        """Parse a union of types (e.g., ["string", "null"])."""
        nullable = "null" in types
        variants = []
        for t in types:
            if t == "null":
                continue
            variant_schema = {**schema, "type": t}
            variant_schema.pop("description", None)
            variant_schema.pop("default", None)
            variants.append(self._parse_type_node(variant_schema, f"{path}/type/{t}"))

        if not variants:
            return PrimitiveNode(type_name="null")
        node = variants[0] if len(variants) == 1 else UnionNode(options=variants)
        return NullableNode(inner=node) if nullable else node

    def _parse_array_node(self, schema: dict[str, Any], path: str) -> ArrayNode:
        """Parse an array type node.

        Tuple forms collapse to an array of the union of their item types.
        """
        items_schema = schema.get("prefixItems", schema.get("items"))
        items = None

        if items_schema is not None:
            if isinstance(items_schema, list):
                variants = [self._parse_schema_node(item, f"{path}/items/{i}") for i, item in enumerate(items_schema)]
                items = variants[0] if len(variants) == 1 else UnionNode(options=variants)
            else:
                items = self._parse_schema_node(items_schema, f"{path}/items")

        return ArrayNode(
            items=items,
            min_items=schema.get("minItems"),
            max_items=schema.get("maxItems"),
        )

    def _parse_object_node(self, schema: dict[str, Any], path: str) -> SchemaNode:
        """Parse an object type node; a properties-less object with a value schema is a record."""
        properties = schema.get("properties")
        additional = schema.get("additionalProperties")

        if not properties and isinstance(additional, dict):
            key = None
            if isinstance(schema.get("propertyNames"), dict):
                key = self._parse_schema_node(schema["propertyNames"], f"{path}/propertyNames")
            value = self._parse_schema_node(additional, f"{path}/additionalProperties")
            return RecordNode(key=key, value=value)

        if not properties:
            raise UnsupportedTypeError("free-form object", path)

        required_fields = schema.get("required", [])
        fields: dict[str, SchemaNode] = {}
        for prop_name, prop_schema in properties.items():
            prop_node = self._parse_schema_node(prop_schema, f"{path}/properties/{prop_name}")
            if prop_name not in required_fields:
                prop_node = OptionalNode(inner=prop_node)
            fields[prop_name] = prop_node

        return ObjectNode(fields=fields)


def from_json_schema(schema: dict[str, Any]) -> SchemaNode:
    """Parse a JSON Schema dictionary into a schema node."""
    return SchemaParser().parse(schema)


def from_pydantic(model: type[BaseModel]) -> SchemaNode:
    """Parse a pydantic model class through its JSON Schema."""
    return SchemaParser().parse(model.model_json_schema())


def to_schema_node(schema: Any) -> SchemaNode:
    """
    Coerce any supported schema representation to a schema node.

    Args:
        schema: A SchemaNode, a JSON Schema dictionary, or a pydantic model class

    Returns:
        The schema node

    Raises:
        TypeError: If the representation is not supported
    """
    if isinstance(schema, SchemaNode):
        return schema
    if isinstance(schema, dict):
        return from_json_schema(schema)
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return from_pydantic(schema)
    raise TypeError(f"Unsupported schema representation: {type(schema).__name__}")
