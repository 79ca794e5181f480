"""
Loader for generated BAML clients.

Probes a fixed, ordered list of artifact forms in a workspace and imports the
first one found. Each workspace is imported at most once per process.
"""

from __future__ import annotations

import importlib.util
import sys
import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from types import ModuleType
from typing import Any

from ..diagnostics import DiagnosticSink, null_sink
from ..errors import ArtifactNotFoundError
from .workspace import Workspace


class GeneratedParser:
    """A loaded client and its registry of parse functions."""

    def __init__(self, module: ModuleType, workspace: Workspace):
        self.module = module
        self.workspace = workspace
        # The sync client is exported as `b`; older layouts export the functions directly
        self.client = getattr(module, "b", module)

    @property
    def registry(self) -> Any:
        return getattr(self.client, "parse", self.client)

    def get(self, function_name: str) -> Callable[[str], Any]:
        """
        Look up a parse function by name.

        Raises:
            ArtifactNotFoundError: If the client has no such function
        """
        registry = self.registry
        if isinstance(registry, Mapping):
            function = registry.get(function_name)
        else:
            function = getattr(registry, function_name, None)
        if not callable(function):
            raise ArtifactNotFoundError(f"Generated client in {self.workspace.path} has no parse function {function_name!r}")
        return function

    def parse(self, function_name: str, text: str) -> Any:
        """Parse raw model output; validation errors of the client propagate unchanged."""
        return self.get(function_name)(text)


class ParserLoader:
    """Imports generated clients from workspaces."""

    _loaded: dict[Path, GeneratedParser] = {}
    _lock = threading.Lock()

    def __init__(self, sink: DiagnosticSink = null_sink):
        self.sink = sink

    def candidates(self, workspace: Workspace) -> list[tuple[Path, bool]]:
        """Artifact forms in probe order, as (path, is_package)."""
        return workspace.artifact_candidates()

    def load(self, workspace: Workspace) -> GeneratedParser:
        """
        Load the generated client of a workspace.

        Args:
            workspace: A compiled workspace

        Returns:
            The generated parser

        Raises:
            ArtifactNotFoundError: If no artifact form exists
        """
        key = workspace.path.resolve()
        with self._lock:
            if key in self._loaded:
                return self._loaded[key]

            for path, is_package in self.candidates(workspace):
                if path.is_file():
                    self.sink(f"Loading generated client from {path}")
                    module = self._import(path, is_package, workspace)
                    parser = GeneratedParser(module, workspace)
                    self._loaded[key] = parser
                    return parser

        raise ArtifactNotFoundError(f"Generated client not found in {workspace.path} (no baml_client/__init__.py, __init__.pyc or baml_client.py)")

    def _import(self, path: Path, is_package: bool, workspace: Workspace) -> ModuleType:
        # A unique name per workspace lets several clients live in one process
        module_name = f"_schema_to_baml_client_{workspace.key[:16]}"
        spec = importlib.util.spec_from_file_location(
            module_name,
            path,
            submodule_search_locations=[str(path.parent)] if is_package else None,
        )
        if spec is None or spec.loader is None:
            raise ArtifactNotFoundError(f"Cannot import generated client from {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        return module
