"""Per-tenant search index provisioning."""

from redis import Redis
from redis.commands.search.field import Field, TextField, VectorField
from redis.commands.search.index_definition import IndexDefinition, IndexType
from redis.commands.search.query import Query
from redis.exceptions import RedisError

from embedding_index.config import IndexSettings, get_settings
from embedding_index.exceptions import ErrorCode, VectorStoreError
from embedding_index.logging_config import get_logger
from embedding_index.observability.metrics import observe_store_operation
from embedding_index.vectorstore.errors import (
    is_index_exists,
    is_index_not_found,
    translate_error,
)

logger = get_logger(__name__)


class IndexManager:
    """Creates, probes and drops tenant indexes.

    One index per tenant, named ``{name_prefix}{tenant}``.
    """

    def __init__(
        self,
        client: Redis,
        settings: IndexSettings | None = None,
    ) -> None:
        """Initialize the index manager.

        Args:
            client: Redis client, owned by the caller.
            settings: Index layout. Uses defaults if not provided.
        """
        self._client = client
        self._settings = settings or get_settings().index

    def index_name(self, tenant: str) -> str:
        """Name of the index that belongs to ``tenant``."""
        return f"{self._settings.name_prefix}{tenant}"

    def build_schema(self) -> list[Field]:
        """Schema shared by every tenant index."""
        return [
            VectorField(
                self._settings.vector_field,
                self._settings.algorithm,
                {
                    "TYPE": self._settings.vector_type,
                    "DIM": self._settings.dimensions,
                    "DISTANCE_METRIC": self._settings.distance_metric,
                    "INITIAL_CAP": self._settings.initial_capacity,
                },
            ),
            TextField("index", weight=1.0),
            TextField("object", weight=1.0),
        ]

    def index_exists(self, tenant: str) -> bool:
        """Probe the tenant index with a match-all query.

        Returns:
            False if the store reports no such index.

        Raises:
            VectorStoreError: For any other store failure.
        """
        name = self.index_name(tenant)
        try:
            with observe_store_operation("probe_index"):
                self._client.ft(name).search(Query("*").paging(0, 0))
        except RedisError as e:
            if is_index_not_found(e):
                return False
            raise translate_error(e, f"probe index {name}", {"index": name}) from e
        return True

    def ensure_index(self, tenant: str, key_prefix: str | None = None) -> bool:
        """Create the tenant index unless it already exists.

        Safe to call concurrently: a duplicate-name rejection from the store
        means another caller created it first and counts as success.

        Args:
            tenant: Tenant identifier.
            key_prefix: Restrict the index to hashes under this prefix.
                All hashes are indexed when omitted.

        Returns:
            True if this call created the index.
        """
        name = self.index_name(tenant)

        if self.index_exists(tenant):
            logger.debug(f"Index already exists: {name}")
            return False

        definition = IndexDefinition(
            prefix=[key_prefix] if key_prefix else [],
            index_type=IndexType.HASH,
        )
        try:
            with observe_store_operation("create_index"):
                self._client.ft(name).create_index(
                    self.build_schema(),
                    definition=definition,
                )
        except RedisError as e:
            if is_index_exists(e):
                logger.info(f"Index created concurrently: {name}")
                return False
            raise translate_error(e, f"create index {name}", {"index": name}) from e

        logger.info(
            f"Created index: {name}",
            extra={
                "index": name,
                "dimensions": self._settings.dimensions,
                "key_prefix": key_prefix,
            },
        )
        return True

    def drop_index(self, name: str) -> None:
        """Drop an index by name, keeping its records.

        Raises:
            VectorStoreError: INDEX_NOT_FOUND if no such index.
        """
        try:
            with observe_store_operation("drop_index"):
                self._client.ft(name).dropindex(delete_documents=False)
        except RedisError as e:
            if is_index_not_found(e):
                raise VectorStoreError(
                    f"Index not found: {name}",
                    code=ErrorCode.INDEX_NOT_FOUND,
                    details={"index": name},
                ) from e
            raise translate_error(e, f"drop index {name}", {"index": name}) from e

        logger.info(f"Dropped index: {name}")

    def flush_all(self) -> None:
        """Remove every key in the store, across all tenants."""
        try:
            with observe_store_operation("flush_all"):
                self._client.flushall()
        except RedisError as e:
            raise translate_error(e, "flush store") from e

        logger.warning("Flushed all data from the store")
