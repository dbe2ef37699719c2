"""Embedding service module."""

from embedding_index.embeddings.models import EmbeddingData, EmbeddingResponse
from embedding_index.embeddings.service import EmbeddingService, HTTPEmbeddingService

__all__ = [
    "EmbeddingData",
    "EmbeddingResponse",
    "EmbeddingService",
    "HTTPEmbeddingService",
]
