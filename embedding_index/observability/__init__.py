"""Observability module for metrics and monitoring."""

from embedding_index.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    observe_store_operation,
    track_embedding_request,
    track_formatted_message,
    track_search_result,
)

__all__ = [
    "MetricsMiddleware",
    "get_metrics",
    "observe_store_operation",
    "track_embedding_request",
    "track_formatted_message",
    "track_search_result",
]
