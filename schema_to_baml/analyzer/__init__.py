"""
Analyzer module.

Contains the IR nodes and the schema to BAML type translator.
"""

from __future__ import annotations

from .ir_nodes import BamlSource, ClassType, FieldDef, TranslationContext
from .translator import BamlTranslator, Unwrapped

__all__ = [
    "BamlSource",
    "ClassType",
    "FieldDef",
    "TranslationContext",
    "BamlTranslator",
    "Unwrapped",
]
