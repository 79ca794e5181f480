"""
Exceptions raised by the schema to BAML pipeline.

Translation, compilation and artifact errors describe a static defect and are
never retried. Errors raised by the text generation collaborator and by the
generated parser are not wrapped: they propagate unchanged.
"""

from __future__ import annotations


class SchemaToBamlError(Exception):
    """Base class for all errors raised by this package."""


class TranslationError(SchemaToBamlError):
    """Raised when a schema cannot be translated to BAML."""


class UnsupportedTypeError(TranslationError):
    """Raised for a schema node kind with no translation rule."""

    def __init__(self, kind: str, path: str = ""):
        self.kind = kind
        self.path = path
        location = f" at {path}" if path else ""
        super().__init__(f"Unsupported schema node: {kind}{location}")


class CompileError(SchemaToBamlError):
    """Raised when the BAML compiler cannot be found, started, or fails."""

    def __init__(self, message: str, returncode: int | None = None):
        self.returncode = returncode
        super().__init__(message)


class ArtifactNotFoundError(SchemaToBamlError):
    """Raised when no loadable generated client exists in a workspace."""


class GenerationError(SchemaToBamlError):
    """Raised by the bundled text generation adapter on a failed request."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class EmptyOutputError(SchemaToBamlError):
    """Raised when text generation succeeds but yields no usable text."""
