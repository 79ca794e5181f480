"""
Backends module.

Contains the BAML source renderer.
"""

from __future__ import annotations

from .baml_backend import BamlBackend

__all__ = ["BamlBackend"]
