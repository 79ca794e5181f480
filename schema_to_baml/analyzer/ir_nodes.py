"""
IR (Intermediate Representation) node definitions.

These nodes hold the result of translating a schema: the classes, enums and
type aliases to declare, in the order they must be rendered.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..utils import to_pascal_case


@dataclass
class FieldDef:
    """A field definition in a class."""

    name: str = ""
    type: str = ""  # Rendered BAML type expression
    optional: bool = False
    description: str | None = None
    alias: str | None = None  # Original property key when `name` had to be sanitized


@dataclass
class ClassType:
    """A class definition."""

    name: str = ""
    fields: list[FieldDef] = field(default_factory=list)


@dataclass
class TranslationContext:
    """Accumulates declarations during one translation pass.

    Classes, enums and aliases share one namespace. `order` lists classes in
    completion order (nested classes before the classes that use them).
    """

    classes: dict[str, ClassType] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    enums: dict[str, list[str]] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)
    counter: int = 0

    # id(LazyNode) -> type expression of its declared target
    lazy_refs: dict[int, str] = field(default_factory=dict)
    lazy_depth: int = 0

    def is_declared(self, name: str) -> bool:
        return name in self.classes or name in self.enums or name in self.aliases

    def unique_name(self, hint: str) -> str:
        """Return a free PascalCase name, suffixing the shared counter on collision."""
        clean = to_pascal_case(hint) or "Type"
        name = clean
        while self.is_declared(name):
            self.counter += 1
            name = f"{clean}{self.counter}"
        return name

    def declare_class(self, hint: str) -> ClassType:
        """Reserve a class name immediately so nested and recursive uses see it taken."""
        class_type = ClassType(name=self.unique_name(hint))
        self.classes[class_type.name] = class_type
        return class_type

    def complete_class(self, class_type: ClassType) -> None:
        self.order.append(class_type.name)

    def declare_enum(self, hint: str, values: list[str]) -> str:
        name = self.unique_name(hint)
        self.enums[name] = list(values)
        return name

    def declare_alias(self, hint: str, expr: str) -> str:
        name = self.unique_name(hint)
        self.aliases[name] = expr
        return name


@dataclass
class BamlSource:
    """Rendered BAML source and the names needed to call its parser."""

    text: str = ""
    function_name: str = ""
    root_type: str = ""
    cache_key: str = ""
