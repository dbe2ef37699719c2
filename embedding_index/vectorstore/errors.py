"""Translation of redis-py errors into VectorStoreError."""

from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from embedding_index.exceptions import ErrorCode, VectorStoreError

_INDEX_NOT_FOUND_MARKERS = ("no such index", "unknown index name")
_INDEX_EXISTS_MARKERS = ("index already exists",)
_DIMENSION_MARKERS = ("blob size", "does not match index's expected size")


def _matches(error: Exception, markers: tuple[str, ...]) -> bool:
    text = str(error).lower()
    return any(marker in text for marker in markers)


def is_index_not_found(error: Exception) -> bool:
    """Whether the store reported that the index does not exist."""
    return isinstance(error, ResponseError) and _matches(error, _INDEX_NOT_FOUND_MARKERS)


def is_index_exists(error: Exception) -> bool:
    """Whether the store rejected a duplicate index name."""
    return isinstance(error, ResponseError) and _matches(error, _INDEX_EXISTS_MARKERS)


def error_code_for(error: RedisError) -> ErrorCode:
    """Map a redis-py error to an ErrorCode."""
    if isinstance(error, (RedisConnectionError, RedisTimeoutError)):
        return ErrorCode.STORE_UNAVAILABLE
    if is_index_not_found(error):
        return ErrorCode.INDEX_NOT_FOUND
    if is_index_exists(error):
        return ErrorCode.INDEX_EXISTS
    if isinstance(error, ResponseError) and _matches(error, _DIMENSION_MARKERS):
        return ErrorCode.DIMENSION_MISMATCH
    return ErrorCode.VECTOR_STORE_ERROR


def translate_error(
    error: RedisError,
    action: str,
    details: dict[str, Any] | None = None,
) -> VectorStoreError:
    """Wrap a redis-py error, keeping the store's message.

    Args:
        error: Error raised by the client.
        action: What was attempted, e.g. ``"search index embeddings-t1"``.
        details: Extra context merged into the error details.

    Returns:
        VectorStoreError to be raised ``from`` the original error.
    """
    return VectorStoreError(
        f"Failed to {action}: {error}",
        code=error_code_for(error),
        details={**(details or {}), "error": str(error)},
    )
