"""Caller-facing embedding index service.

Wires the index manager, record store, searcher and formatter around one
injected Redis client.
"""

from redis import Redis
from redis.exceptions import RedisError

from embedding_index.config import IndexSettings, RedisSettings, Settings, get_settings
from embedding_index.embeddings.models import EmbeddingResponse
from embedding_index.exceptions import ConfigurationError
from embedding_index.formatting import render
from embedding_index.logging_config import get_logger
from embedding_index.observability.metrics import track_formatted_message
from embedding_index.vectorstore.index import IndexManager
from embedding_index.vectorstore.models import SearchResult
from embedding_index.vectorstore.records import RecordStore
from embedding_index.vectorstore.search import SimilaritySearcher

logger = get_logger(__name__)


def create_redis_client(settings: RedisSettings) -> Redis:
    """Build a Redis client from settings.

    Raises:
        ConfigurationError: If the URL cannot be parsed.
    """
    password = settings.password.get_secret_value() if settings.password else None
    try:
        return Redis.from_url(
            settings.url,
            password=password,
            socket_timeout=settings.socket_timeout,
        )
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid Redis URL: {e}",
            details={"url": settings.url},
        ) from e


class EmbeddingIndexService:
    """Index, search and format tenant embeddings."""

    def __init__(
        self,
        client: Redis,
        settings: IndexSettings | None = None,
        owns_client: bool = False,
    ) -> None:
        """Initialize the service.

        Args:
            client: Redis client shared by all components.
            settings: Index layout and query parameters.
            owns_client: Close the client on ``close()``.
        """
        self._client = client
        self._settings = settings or get_settings().index
        self._owns_client = owns_client

        self.indexes = IndexManager(client, self._settings)
        self.records = RecordStore(client, self._settings)
        self.searcher = SimilaritySearcher(client, self._settings)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "EmbeddingIndexService":
        """Build a service that owns a client created from settings."""
        settings = settings or get_settings()
        client = create_redis_client(settings.redis)
        return cls(client, settings.index, owns_client=True)

    def create_index(self, tenant_id: str, key_prefix: str | None = None) -> bool:
        """Provision the tenant index if missing.

        Returns:
            True if the index was created by this call.
        """
        return self.indexes.ensure_index(tenant_id, key_prefix=key_prefix)

    def index_embeddings(
        self,
        embedding_response: EmbeddingResponse,
        batch_key: str,
        title: str,
        description: str,
    ) -> int:
        """Store every chunk of an embedding response under ``batch_key``.

        Returns:
            Number of chunk records written.
        """
        written = self.records.write_records(
            batch_key,
            title,
            description,
            embedding_response.vectors(),
        )
        logger.info(
            f"Indexed {written} chunks for {batch_key}",
            extra={"batch_key": batch_key, "chunks": written},
        )
        return written

    def delete_embedding(self, batch_key: str, chunk_count: int | None = None) -> int:
        """Delete the chunk records of ``batch_key``.

        Returns:
            Number of records removed.
        """
        deleted = self.records.delete_records(batch_key, chunk_count=chunk_count)
        logger.info(
            f"Deleted {deleted} chunks for {batch_key}",
            extra={"batch_key": batch_key, "chunks": deleted},
        )
        return deleted

    def drop_index(self, index_name: str) -> None:
        """Drop an index by its full name."""
        self.indexes.drop_index(index_name)

    def delete_all_documents(self) -> None:
        """Flush the whole store."""
        self.indexes.flush_all()

    def similarity_search(
        self,
        tenant_id: str,
        query_embedding: EmbeddingResponse,
    ) -> SearchResult | None:
        """KNN search; with several query chunks only the last one counts."""
        return self.searcher.query(tenant_id, query_embedding)

    def similarity_search_merged(
        self,
        tenant_id: str,
        query_embedding: EmbeddingResponse,
    ) -> SearchResult | None:
        """KNN search ranking the hits of all query chunks together."""
        return self.searcher.query_merged(tenant_id, query_embedding)

    def format_message(self, result: SearchResult | None) -> str:
        """Render a search result within the configured message budget."""
        if result is None:
            return ""
        message = render(result.documents, budget=self._settings.message_budget)
        track_formatted_message(len(message))
        return message

    def ping(self) -> bool:
        """Whether the store answers."""
        try:
            return bool(self._client.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    def close(self) -> None:
        """Close the Redis client if this service owns it."""
        if self._owns_client:
            self._client.close()
