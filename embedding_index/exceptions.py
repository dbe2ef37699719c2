"""Application exception hierarchy.

All custom exceptions inherit from EmbeddingIndexError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "EIS-1000"
    CONFIGURATION_ERROR = "EIS-1001"
    VALIDATION_ERROR = "EIS-1002"

    # Embedding errors (3xxx)
    EMBEDDING_SERVICE_ERROR = "EIS-3000"

    # Vector store errors (4xxx)
    VECTOR_STORE_ERROR = "EIS-4000"
    INDEX_NOT_FOUND = "EIS-4001"
    INDEX_EXISTS = "EIS-4002"
    DIMENSION_MISMATCH = "EIS-4003"
    STORE_UNAVAILABLE = "EIS-4004"


class EmbeddingIndexError(Exception):
    """Base exception for all embedding index errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(EmbeddingIndexError):
    """Configuration or environment error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(EmbeddingIndexError):
    """Input validation error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class EmbeddingError(EmbeddingIndexError):
    """Embedding service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class VectorStoreError(EmbeddingIndexError):
    """Vector store operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VECTOR_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)

