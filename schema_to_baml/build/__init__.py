"""
Build module.

Contains the content-addressed workspace cache, the BAML compiler invoker and
the generated client loader.
"""

from __future__ import annotations

from .compiler import BamlCompiler
from .loader import GeneratedParser, ParserLoader
from .workspace import Workspace, atomic_write, content_hash

__all__ = [
    "BamlCompiler",
    "GeneratedParser",
    "ParserLoader",
    "Workspace",
    "atomic_write",
    "content_hash",
]
