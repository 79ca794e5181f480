"""Schema to BAML

Structured output for text generation services that cannot emit it natively.
A schema is translated to BAML, compiled once into a parser by the BAML
compiler, and the parser validates the raw text the model produces.
"""

__version__ = "0.3.0"

from .analyzer import BamlSource, BamlTranslator, TranslationContext
from .backends import BamlBackend
from .build import BamlCompiler, GeneratedParser, ParserLoader, Workspace
from .clients import OpenAIChatGenerator
from .config import BuildConfig, RetryConfig, SchemaToBamlConfig, TranslatorConfig
from .errors import (
    ArtifactNotFoundError,
    CompileError,
    EmptyOutputError,
    GenerationError,
    SchemaToBamlError,
    TranslationError,
    UnsupportedTypeError,
)
from .hint import build_json_hint, describe_schema, merge_hint_into_messages
from .orchestrator import GenerateObjectResult, GenerationOrchestrator, GenerationState
from .pipeline import SchemaToBaml, build_baml_source, generate_object

__all__ = [
    "SchemaToBaml",
    "generate_object",
    "build_baml_source",
    "GenerateObjectResult",
    "GenerationOrchestrator",
    "GenerationState",
    "BamlSource",
    "BamlTranslator",
    "TranslationContext",
    "BamlBackend",
    "BamlCompiler",
    "OpenAIChatGenerator",
    "GeneratedParser",
    "ParserLoader",
    "Workspace",
    "SchemaToBamlConfig",
    "TranslatorConfig",
    "BuildConfig",
    "RetryConfig",
    "build_json_hint",
    "describe_schema",
    "merge_hint_into_messages",
    "SchemaToBamlError",
    "TranslationError",
    "UnsupportedTypeError",
    "CompileError",
    "ArtifactNotFoundError",
    "GenerationError",
    "EmptyOutputError",
]
