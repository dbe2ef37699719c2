"""Redis vector store module."""

from embedding_index.vectorstore.encoding import decode_vector, encode_vector
from embedding_index.vectorstore.index import IndexManager
from embedding_index.vectorstore.models import (
    EmbeddingRecord,
    SearchDocument,
    SearchResult,
    record_key,
)
from embedding_index.vectorstore.records import RecordStore
from embedding_index.vectorstore.search import SimilaritySearcher

__all__ = [
    "EmbeddingRecord",
    "IndexManager",
    "RecordStore",
    "SearchDocument",
    "SearchResult",
    "SimilaritySearcher",
    "decode_vector",
    "encode_vector",
    "record_key",
]
