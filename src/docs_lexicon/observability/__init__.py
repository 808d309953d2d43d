"""Observability module: structured logging and metrics."""

from docs_lexicon.observability.context import get_trace_context, set_trace_context, start_operation, trace_context
from docs_lexicon.observability.logging import JsonFormatter, configure_logging
from docs_lexicon.observability.metrics import (
    INDEX_DOC_COUNT,
    PERSISTENCE_ERRORS,
    SEARCH_LATENCY,
    UPSERT_COUNT,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)


__all__ = [
    "INDEX_DOC_COUNT",
    "PERSISTENCE_ERRORS",
    "SEARCH_LATENCY",
    "UPSERT_COUNT",
    "JsonFormatter",
    "configure_logging",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "init_metrics",
    "set_trace_context",
    "start_operation",
    "track_latency",
    "trace_context",
]
