"""
Schema node definitions.

These nodes are the closed set of schema shapes the translator understands.
They can be built directly, or produced from JSON Schema and pydantic models
by the parser.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass
class SchemaNode:
    """Base class for all schema nodes."""

    # Human readable description, copied verbatim into @description(...)
    description: str | None = None

    @property
    def kind(self) -> str:
        return type(self).__name__

    def optional(self) -> OptionalNode:
        return OptionalNode(inner=self)

    def nullable(self) -> NullableNode:
        return NullableNode(inner=self)

    def describe(self, text: str) -> SchemaNode:
        self.description = text
        return self


@dataclass
class PrimitiveNode(SchemaNode):
    """Represents a primitive type (string, integer, number, boolean, null)."""

    type_name: str = "string"


@dataclass
class LiteralNode(SchemaNode):
    """Represents a single constant value."""

    value: Any = None


@dataclass
class ObjectNode(SchemaNode):
    """Represents an object with ordered, named fields."""

    fields: dict[str, SchemaNode] = field(default_factory=dict)


@dataclass
class ArrayNode(SchemaNode):
    """Represents a homogeneous array.

    `items` may also be a zero-argument callable returning the element node.
    """

    items: SchemaNode | Callable[[], SchemaNode] | None = None
    min_items: int | None = None
    max_items: int | None = None


@dataclass
class EnumNode(SchemaNode):
    """Represents an enumeration of string values."""

    values: list[str] = field(default_factory=list)


@dataclass
class NativeEnumNode(SchemaNode):
    """Represents a Python Enum class (or a name -> value mapping)."""

    enum: type[Enum] | Mapping[str, Any] | None = None

    @property
    def values(self) -> list[str]:
        """String member values in declaration order; other values are skipped."""
        if self.enum is None:
            return []
        if isinstance(self.enum, Mapping):
            raw = list(self.enum.values())
        else:
            raw = [member.value for member in self.enum]
        return [v for v in raw if isinstance(v, str)]


@dataclass
class RecordNode(SchemaNode):
    """Represents a map from keys to values (key defaults to string)."""

    key: SchemaNode | None = None
    value: SchemaNode | None = None


@dataclass
class UnionNode(SchemaNode):
    """Represents a union of alternatives, kept in order."""

    options: list[SchemaNode] = field(default_factory=list)


@dataclass
class LazyNode(SchemaNode):
    """Represents a deferred node, used for forward and recursive references.

    The same LazyNode instance must be reused for every reference to the same
    target so that recursive objects are declared once.
    """

    resolver: Callable[[], SchemaNode] | None = None

    # Preferred class name for the resolved node
    name: str | None = None

    def resolve(self) -> SchemaNode:
        if self.resolver is None:
            raise ValueError("LazyNode has no resolver")
        return self.resolver()


@dataclass
class ModifierNode(SchemaNode):
    """Base class for wrappers that only decorate an inner node."""

    inner: SchemaNode | None = None

    @property
    def target(self) -> SchemaNode | None:
        return self.inner


@dataclass
class OptionalNode(ModifierNode):
    """The wrapped value may be absent."""


@dataclass
class NullableNode(ModifierNode):
    """The wrapped value may be null."""


@dataclass
class DefaultNode(ModifierNode):
    """The wrapped value has a default."""

    default: Any = None


@dataclass
class CatchNode(ModifierNode):
    """The wrapped value falls back to a value on failure."""

    fallback: Any = None


@dataclass
class ReadonlyNode(ModifierNode):
    """The wrapped value is read-only."""


@dataclass
class BrandedNode(ModifierNode):
    """The wrapped value carries a nominal brand."""

    brand: str = ""


@dataclass
class EffectsNode(ModifierNode):
    """The wrapped value goes through a refinement or transform."""

    effect: Callable[[Any], Any] | None = None


@dataclass
class PipelineNode(ModifierNode):
    """Input validated by `source`, output described by `inner`."""

    source: SchemaNode | None = None

    @property
    def target(self) -> SchemaNode | None:
        return self.inner if self.inner is not None else self.source


# Attribute names under which array-like nodes expose their element
ARRAY_ELEMENT_ATTRS = ("items", "element", "item", "item_type")


def element_of(node: SchemaNode) -> SchemaNode | None:
    """Return the element node of an array, calling it if it is a thunk."""
    for attr in ARRAY_ELEMENT_ATTRS:
        element = getattr(node, attr, None)
        if callable(element) and not isinstance(element, SchemaNode):
            element = element()
        if element is not None:
            return element
    return None
