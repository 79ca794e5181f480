"""
Utility functions for the schema to BAML translator.
"""

import json
import re

# Runs of anything that cannot appear in a BAML type name
_SEPARATOR_PATTERN = re.compile(r"[^a-zA-Z0-9]+")

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_FIELD_INVALID_PATTERN = re.compile(r"[^A-Za-z0-9_]")


def _split_into_words(text: str) -> list[str]:
    """Split text on every non-alphanumeric run."""
    return [word for word in _SEPARATOR_PATTERN.split(text) if word]


def _capitalize_and_join(words: list[str]) -> str:
    """Upper-case the first letter of each word, keep the rest as is."""
    return "".join(word[0].upper() + word[1:] for word in words)


def to_pascal_case(text: str) -> str:
    """Convert an arbitrary name hint to PascalCase.

    Unlike a strict snake_case conversion, inner capitals are preserved so
    that camelCase field names stay readable.

    Examples:
        "Root_tags" -> "RootTags"
        "Root_isActive" -> "RootIsActive"
        "user profile" -> "UserProfile"
        "RootU0" -> "RootU0"
        "1Item" -> "Type1Item"

    Args:
        text: The text to convert

    Returns:
        PascalCase string (empty if the text has no alphanumerics)
    """
    if not text:
        return ""
    result = _capitalize_and_join(_split_into_words(text))
    if result[:1].isdigit():
        return f"Type{result}"
    return result


def to_field_name(key: str) -> str:
    """Turn a property key into a BAML field identifier.

    Invalid characters become underscores and a leading digit gets a
    `field_` prefix: "first-name" -> "first_name", "2fa" -> "field_2fa".
    """
    name = _FIELD_INVALID_PATTERN.sub("_", key)
    if not name or name[0].isdigit():
        return f"field_{name}"
    return name


def is_identifier(text: str) -> bool:
    """Whether text can be used as a bare BAML identifier (enum member, field)."""
    return bool(_IDENTIFIER_PATTERN.match(text))


def is_union(expr: str) -> bool:
    """Whether a type expression has a `|` at the top level."""
    depth = 0
    for char in expr:
        if char in "(<{[":
            depth += 1
        elif char in ")>}]":
            depth -= 1
        elif char == "|" and depth == 0:
            return True
    return False


def paren_if_union(expr: str) -> str:
    """Parenthesize a union type expression so a suffix binds to the whole union."""
    return f"({expr})" if is_union(expr) else expr


def quote(value) -> str:
    """JSON-quote a value, keeping non-ASCII characters verbatim."""
    return json.dumps(value, ensure_ascii=False)
