"""Embedding chunk records stored as Redis hashes."""

from collections.abc import Sequence

from redis import Redis
from redis.exceptions import RedisError

from embedding_index.config import IndexSettings, get_settings
from embedding_index.logging_config import get_logger
from embedding_index.observability.metrics import observe_store_operation
from embedding_index.vectorstore.encoding import encode_vector
from embedding_index.vectorstore.errors import translate_error
from embedding_index.vectorstore.models import EmbeddingRecord, record_key

logger = get_logger(__name__)


class RecordStore:
    """Writes and deletes the chunk records of a batch.

    Each chunk is its own hash at ``{batch_key}-{position}``. Writes are
    independent commands: a failure part-way leaves earlier chunks stored.
    """

    def __init__(
        self,
        client: Redis,
        settings: IndexSettings | None = None,
    ) -> None:
        """Initialize the record store.

        Args:
            client: Redis client, owned by the caller.
            settings: Index layout. Uses defaults if not provided.
        """
        self._client = client
        self._settings = settings or get_settings().index

    def build_records(
        self,
        batch_key: str,
        title: str,
        description: str,
        chunks: Sequence[Sequence[float]],
    ) -> list[EmbeddingRecord]:
        """Lay out one record per chunk, keyed by chunk position."""
        return [
            EmbeddingRecord(
                key=record_key(batch_key, i),
                index=i,
                title=title,
                description=description,
                embedding=encode_vector(chunk),
            )
            for i, chunk in enumerate(chunks)
        ]

    def write_records(
        self,
        batch_key: str,
        title: str,
        description: str,
        chunks: Sequence[Sequence[float]],
    ) -> int:
        """Write every chunk of a batch, replacing records at the same keys.

        Args:
            batch_key: Key shared by the chunks of one document.
            title: Document title stored on each chunk.
            description: Document description stored on each chunk.
            chunks: Embedding vectors in chunk order.

        Returns:
            Number of records written.

        Raises:
            VectorStoreError: If a write fails; ``details["written"]`` is the
                number of chunks stored before the failure.
        """
        records = self.build_records(batch_key, title, description, chunks)

        written = 0
        for record in records:
            try:
                with observe_store_operation("write_record"):
                    self._client.hset(record.key, mapping=record.to_mapping())
            except RedisError as e:
                raise translate_error(
                    e,
                    f"write record {record.key}",
                    {
                        "batch_key": batch_key,
                        "failed_key": record.key,
                        "written": written,
                        "total": len(records),
                    },
                ) from e
            written += 1

        logger.debug(
            f"Wrote {written} records",
            extra={"batch_key": batch_key},
        )
        return written

    def delete_records(
        self,
        batch_key: str,
        chunk_count: int | None = None,
    ) -> int:
        """Delete the chunk records of a batch.

        Keys ``{batch_key}-0`` to ``{batch_key}-(N-1)`` are removed, where N is
        ``chunk_count`` or the configured ``delete_chunk_count`` bound. Chunks
        beyond N are left in place.

        Returns:
            Number of keys that existed and were removed.
        """
        count = chunk_count if chunk_count is not None else self._settings.delete_chunk_count

        deleted = 0
        for i in range(count):
            key = record_key(batch_key, i)
            logger.debug(f"Deleting key: {key}")
            try:
                with observe_store_operation("delete_record"):
                    deleted += self._client.delete(key)
            except RedisError as e:
                raise translate_error(
                    e,
                    f"delete record {key}",
                    {"batch_key": batch_key, "failed_key": key, "deleted": deleted},
                ) from e

        return deleted
