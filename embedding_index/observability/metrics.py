"""Prometheus metrics for the embedding index service.

Provides metrics instrumentation for:
- HTTP request latency and counts
- Redis vector store operation latency
- Similarity search results (documents, scores)
- Formatted message length
- Embedding request latency
"""

import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from embedding_index.logging_config import get_logger

logger = get_logger(__name__)

# HTTP Request Metrics
HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

HTTP_REQUEST_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

# Vector Store Metrics
VECTORSTORE_OPERATION_DURATION = Histogram(
    "vectorstore_operation_duration_seconds",
    "Vector store operation duration",
    ["operation", "status"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)

VECTORSTORE_OPERATION_TOTAL = Counter(
    "vectorstore_operations_total",
    "Total vector store operations",
    ["operation", "status"],
)

# Search Metrics
SEARCH_DOCUMENTS_RETURNED = Histogram(
    "search_documents_returned",
    "Number of documents returned per similarity search",
    buckets=[0, 1, 2, 3, 5, 10, 20, 50],
)

SEARCH_TOP_SCORE = Histogram(
    "search_top_score",
    "Best cosine distance per similarity search (lower is closer)",
    buckets=[0.05, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.8, 1.0, 2.0],
)

FORMATTED_MESSAGE_LENGTH = Histogram(
    "formatted_message_length",
    "Length of formatted search messages",
    buckets=[0, 250, 500, 1000, 2500, 5000, 7500],
)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "status"],
)

EMBEDDING_BATCH_SIZE = Histogram(
    "embedding_batch_size",
    "Embedding batch size",
    ["model"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    def __init__(self, app: ASGIApp) -> None:
        """Initialize the middleware."""
        super().__init__(app)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and collect metrics."""
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start_time

        endpoint = self._normalize_endpoint(request.url.path)

        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).observe(duration)

        HTTP_REQUEST_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce cardinality.

        Tenant ids, document keys and index names are path parameters,
        so only the resource kind is kept.
        """
        if path.startswith("/health"):
            return "/health"
        if path.startswith("/api/v1/"):
            parts = path.split("/")
            if len(parts) >= 4:
                if parts[3] == "tenants" and len(parts) >= 6:
                    return f"/api/v1/tenants/{{tenant_id}}/{parts[5]}"
                return f"/api/v1/{parts[3]}"
        return path


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


@contextmanager
def observe_store_operation(operation: str) -> Iterator[None]:
    """Time a vector store operation and count its outcome.

    Args:
        operation: Operation label (e.g. ``create_index``, ``search``).
    """
    status = "success"
    start_time = time.perf_counter()
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        VECTORSTORE_OPERATION_DURATION.labels(
            operation=operation,
            status=status,
        ).observe(time.perf_counter() - start_time)
        VECTORSTORE_OPERATION_TOTAL.labels(operation=operation, status=status).inc()


def track_search_result(
    documents_returned: int,
    top_score: float | None,
) -> None:
    """Track similarity search metrics.

    Args:
        documents_returned: Number of ranked documents returned.
        top_score: Distance of the closest document, if any.
    """
    SEARCH_DOCUMENTS_RETURNED.observe(documents_returned)
    if top_score is not None:
        SEARCH_TOP_SCORE.observe(top_score)


def track_formatted_message(length: int) -> None:
    """Track the length of a formatted result message."""
    FORMATTED_MESSAGE_LENGTH.observe(length)


def track_embedding_request(
    model: str,
    duration: float,
    batch_size: int,
    success: bool = True,
) -> None:
    """Track embedding request metrics.

    Args:
        model: Embedding model name.
        duration: Request duration in seconds.
        batch_size: Number of texts in the batch.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    EMBEDDING_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, status=status).inc()
    EMBEDDING_BATCH_SIZE.labels(model=model).observe(batch_size)
