"""
BAML compiler invocation.

Finds `baml-cli` and runs `generate` in a workspace. A failing compile is a
static defect of the rendered source and is never retried.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import sys
from importlib import metadata
from typing import TextIO

from ..config import BuildConfig
from ..diagnostics import DiagnosticSink, null_sink
from ..errors import CompileError
from .workspace import Workspace

logger = logging.getLogger(__name__)

# Directories holding console scripts, relative to site-packages
SCRIPT_DIRS = {"bin", "Scripts"}


class BamlCompiler:
    """Runs the BAML compiler against a workspace."""

    def __init__(self, config: BuildConfig | None = None, sink: DiagnosticSink = null_sink):
        self.config = config or BuildConfig()
        self.sink = sink
        self._noise = re.compile(self.config.noise_pattern) if self.config.noise_pattern else None

    def resolve_command(self) -> list[str]:
        """
        Resolve the command that starts the compiler.

        Tried in order: the console script declared by the installed compiler
        distribution, the executable on PATH, then the on-demand runner.

        Returns:
            Command prefix (arguments are appended by the caller)

        Raises:
            CompileError: If none of them is available
        """
        command = self._resolve_from_distribution()
        if command:
            self.sink(f"Resolved {self.config.compiler_executable} from {self.config.compiler_package}: {command[0]}")
            return command

        on_path = shutil.which(self.config.compiler_executable)
        if on_path:
            self.sink(f"Resolved {self.config.compiler_executable} on PATH: {on_path}")
            return [on_path]

        runner = self.config.package_runner
        if runner and shutil.which(runner[0]):
            self.sink(f"Falling back to on-demand runner: {' '.join(runner)}")
            return list(runner)

        raise CompileError(f"Unable to find {self.config.compiler_executable}. Install it with: pip install {self.config.compiler_package}")

    def _resolve_from_distribution(self) -> list[str] | None:
        """Locate the console script among the files recorded for the distribution."""
        try:
            dist = metadata.distribution(self.config.compiler_package)
        except metadata.PackageNotFoundError:
            return None

        name = self.config.compiler_executable
        declared = {ep.name for ep in dist.entry_points if ep.group == "console_scripts"}
        if name not in declared:
            return None

        for file in dist.files or []:
            if file.stem == name and file.parent.name in SCRIPT_DIRS:
                path = dist.locate_file(file)
                if path.exists():
                    return [str(path)]
        return None

    def compile(self, workspace: Workspace) -> None:
        """
        Generate the client of a workspace.

        Args:
            workspace: Workspace whose source has been written

        Raises:
            CompileError: If the compiler is missing, cannot start, or fails
        """
        command = self.resolve_command() + ["generate", "--from", f"./{self.config.source_dir}"]
        logger.info("Compiling BAML workspace %s", workspace.key)
        self.sink(f"Running {' '.join(command)} in {workspace.path}")

        try:
            result = subprocess.run(
                command,
                cwd=workspace.path,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise CompileError(f"Failed to start BAML compiler {command[0]}: {e}") from e

        self._forward(result.stdout, sys.stdout)
        self._forward(result.stderr, sys.stderr, drop_noise=True)

        if result.returncode != 0:
            raise CompileError(
                f"BAML compiler exited with status {result.returncode} in {workspace.path}",
                returncode=result.returncode,
            )

    def _forward(self, output: str, stream: TextIO, drop_noise: bool = False) -> None:
        """Copy child output to one of our streams, dropping known benign lines."""
        if not output:
            return
        for line in output.splitlines(keepends=True):
            if drop_noise and self._noise and self._noise.search(line):
                continue
            stream.write(line)
        stream.flush()
