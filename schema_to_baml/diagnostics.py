"""
Diagnostic sinks.

Components that report build details take a sink at construction instead of
reading a debug flag from the environment. The default sink drops everything.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

DiagnosticSink = Callable[[str], None]


def null_sink(message: str) -> None:
    """Discard a diagnostic message."""


def logger_sink(logger: logging.Logger | None = None, level: int = logging.DEBUG) -> DiagnosticSink:
    """
    Build a sink that forwards messages to a logger.

    Args:
        logger: Target logger (defaults to the package logger)
        level: Level used for every message

    Returns:
        A diagnostic sink
    """
    target = logger or logging.getLogger("schema_to_baml")

    def sink(message: str) -> None:
        target.log(level, message)

    return sink
