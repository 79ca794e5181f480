"""
Content-addressed build workspaces.

Each distinct BAML source gets a directory named after the sha256 of its text
under a shared cache root. The directory holds the source and, once compiled,
the generated client. Workspaces are never deleted here.
"""

from __future__ import annotations

import hashlib
import tempfile
from pathlib import Path

from ..config import BuildConfig


def content_hash(text: str) -> str:
    """Cache key of a rendered source."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def atomic_write(path: Path, content: str) -> None:
    """Write content to file atomically.

    The content goes to a temporary file in the same directory, which then
    replaces the target, so readers never see a partial file. Concurrent
    writers of identical content are harmless.

    Args:
        path: Target file path
        content: Content to write

    Raises:
        OSError: If file operations fail
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        text=True,
    )
    temp_path = Path(temp_path_str)

    try:
        with open(temp_fd, "w", encoding="utf-8") as f:
            f.write(content)
        temp_path.replace(path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


class Workspace:
    """A cache directory for one rendered BAML source."""

    def __init__(self, root: Path, key: str, config: BuildConfig | None = None):
        self.config = config or BuildConfig()
        self.key = key
        self.path = Path(root) / key

    @classmethod
    def for_source(cls, source: str, config: BuildConfig | None = None) -> Workspace:
        """Locate the workspace of a source under the configured cache root."""
        config = config or BuildConfig()
        return cls(config.resolved_cache_root(), content_hash(source), config)

    @property
    def source_dir(self) -> Path:
        return self.path / self.config.source_dir

    @property
    def source_path(self) -> Path:
        return self.source_dir / self.config.source_file

    @property
    def client_dir(self) -> Path:
        return self.path / self.config.client_dir

    def artifact_candidates(self) -> list[tuple[Path, bool]]:
        """Generated client forms in probe order, as (path, is_package)."""
        return [
            (self.client_dir / "__init__.py", True),
            (self.client_dir / "__init__.pyc", True),
            (self.client_dir.with_suffix(".py"), False),
        ]

    @property
    def is_built(self) -> bool:
        """Whether any generated client form exists (cache hit)."""
        return any(path.is_file() for path, _ in self.artifact_candidates())

    def prepare(self, source: str) -> None:
        """Write the source file, creating directories as needed."""
        atomic_write(self.source_path, source)

    def __repr__(self) -> str:
        return f"Workspace({str(self.path)!r})"
