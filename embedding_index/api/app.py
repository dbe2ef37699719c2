"""FastAPI application entry point.

Configures the application with logging, exception handling, metrics and
health checks, and owns the Redis and embedding clients for its lifetime.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from embedding_index import __version__
from embedding_index.api.routes import router
from embedding_index.config import get_settings
from embedding_index.embeddings.service import HTTPEmbeddingService
from embedding_index.exceptions import EmbeddingIndexError, ErrorCode
from embedding_index.logging_config import get_logger, setup_logging
from embedding_index.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
)
from embedding_index.service import EmbeddingIndexService

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Builds the services on startup and closes their clients on shutdown.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)
    logger.info(
        "Starting embedding index service",
        extra={
            "version": __version__,
            "environment": settings.environment.value,
        },
    )

    app.state.index_service = EmbeddingIndexService.from_settings(settings)
    app.state.embedding_service = HTTPEmbeddingService(settings.embedding)

    yield

    logger.info("Shutting down embedding index service")
    app.state.embedding_service.close()
    app.state.index_service.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Embedding Index Service",
        description="Per-tenant embedding indexes and KNN search on Redis Stack",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(MetricsMiddleware)
    app.add_exception_handler(EmbeddingIndexError, embedding_index_exception_handler)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/ready", readiness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/live", liveness_check, methods=["GET"], tags=["Health"])
    app.add_api_route(
        "/metrics",
        metrics_endpoint,
        methods=["GET"],
        tags=["Observability"],
        include_in_schema=False,
    )
    app.include_router(router)

    return app


async def embedding_index_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle EmbeddingIndexError exceptions.

    Converts exceptions to structured JSON responses.
    """
    if not isinstance(exc, EmbeddingIndexError):
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.INTERNAL_ERROR.value,
                    "message": str(exc),
                    "details": {},
                }
            },
        )

    logger.error(
        f"Request failed: {exc.message}",
        extra={
            "error_code": exc.code.value,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    return JSONResponse(
        status_code=_get_status_code(exc.code),
        content=exc.to_dict(),
    )


_STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INDEX_NOT_FOUND: 404,
    ErrorCode.INDEX_EXISTS: 409,
    ErrorCode.DIMENSION_MISMATCH: 422,
    ErrorCode.EMBEDDING_SERVICE_ERROR: 502,
    ErrorCode.STORE_UNAVAILABLE: 503,
}


def _get_status_code(error_code: ErrorCode) -> int:
    """Map error code to HTTP status code."""
    return _STATUS_CODES.get(error_code, 500)


async def health_check() -> dict[str, Any]:
    """Basic health check endpoint.

    Returns:
        Health status with version and timestamp.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check(request: Request) -> dict[str, Any]:
    """Kubernetes readiness probe.

    Pings Redis when the index service has been started.

    Returns:
        Readiness status with component checks.
    """
    checks: dict[str, str] = {
        "config": "ok",
    }

    index_service = getattr(request.app.state, "index_service", None)
    if index_service is not None:
        reachable = await run_in_threadpool(index_service.ping)
        checks["redis"] = "ok" if reachable else "unavailable"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe.

    Returns:
        Liveness status.
    """
    return {"status": "alive"}


async def metrics_endpoint() -> Response:
    """Expose Prometheus metrics."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


# Create the application instance
app = create_app()
