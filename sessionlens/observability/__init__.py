"""Observability helpers."""

from sessionlens.observability.otel import (
    initialize,
    is_enabled,
    shutdown,
    start_span,
    record_ingestion,
    record_parser_failure,
)

__all__ = [
    "initialize",
    "is_enabled",
    "shutdown",
    "start_span",
    "record_ingestion",
    "record_parser_failure",
]
