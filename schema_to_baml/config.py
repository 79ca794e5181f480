"""
Configuration for the schema to BAML pipeline.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CACHE_DIR_NAME = "baml-runtime-cache"


@dataclass
class TranslatorConfig:
    """Configuration for schema translation and rendering."""

    # Maximum number of modifier wrappers peeled from a single node
    unwrap_limit: int = 50

    # Maximum nesting of lazy nodes that do not resolve to an object
    max_lazy_depth: int = 32

    # Name hint for the top-level type
    root_name: str = "Root"

    # Prefix of the generated parse function name (e.g. "Gen" + "Root")
    function_prefix: str = "Gen"

    # BAML client declared on the parse function (never called for parsing)
    client: str = "openai/gpt-4o"

    @property
    def function_name(self) -> str:
        return f"{self.function_prefix}{self.root_name}"


@dataclass
class BuildConfig:
    """Configuration for the workspace cache and the BAML compiler."""

    # Root of the build cache (empty = <tempdir>/baml-runtime-cache)
    cache_root: str = ""

    # Distribution that ships the compiler
    compiler_package: str = "baml-py"

    # Console script name of the compiler
    compiler_executable: str = "baml-cli"

    # On-demand runner used when the compiler is not installed
    package_runner: list[str] = field(default_factory=lambda: ["uvx", "--from", "baml-py", "baml-cli"])

    # Workspace layout
    source_dir: str = "baml_src"
    source_file: str = "schema.baml"
    client_dir: str = "baml_client"

    # stderr lines matching this pattern are not forwarded
    # (dependency resolution chatter of the on-demand runner)
    noise_pattern: str = r"^\s*(Resolved|Prepared|Installed|Uninstalled|Audited) \d+ packages? in "

    def resolved_cache_root(self) -> Path:
        if self.cache_root:
            return Path(self.cache_root)
        return Path(tempfile.gettempdir()) / DEFAULT_CACHE_DIR_NAME


@dataclass
class RetryConfig:
    """Retry policy for the text generation call."""

    # Total number of attempts, including the first one
    max_attempts: int = 3

    # Delay unit in seconds; attempt n waits retry_delay * n before retrying
    retry_delay: float = 1.0


@dataclass
class SchemaToBamlConfig:
    """Configuration options for the whole pipeline."""

    translator: TranslatorConfig = field(default_factory=TranslatorConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)

    @staticmethod
    def from_dict(d: dict) -> SchemaToBamlConfig:
        """Create a config from a dictionary."""
        config = SchemaToBamlConfig()
        for k, v in d.items():
            if k == "translator" and isinstance(v, dict):
                config.translator = TranslatorConfig(**v)
            elif k == "build" and isinstance(v, dict):
                config.build = BuildConfig(**v)
            elif k == "retry" and isinstance(v, dict):
                config.retry = RetryConfig(**v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "translator": {
                "unwrap_limit": self.translator.unwrap_limit,
                "max_lazy_depth": self.translator.max_lazy_depth,
                "root_name": self.translator.root_name,
                "function_prefix": self.translator.function_prefix,
                "client": self.translator.client,
            },
            "build": {
                "cache_root": self.build.cache_root,
                "compiler_package": self.build.compiler_package,
                "compiler_executable": self.build.compiler_executable,
                "package_runner": list(self.build.package_runner),
                "source_dir": self.build.source_dir,
                "source_file": self.build.source_file,
                "client_dir": self.build.client_dir,
                "noise_pattern": self.build.noise_pattern,
            },
            "retry": {
                "max_attempts": self.retry.max_attempts,
                "retry_delay": self.retry.retry_delay,
            },
        }
