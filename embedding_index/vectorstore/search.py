"""KNN similarity search against tenant indexes."""

from collections.abc import Sequence
from typing import Any

from redis import Redis
from redis.commands.search.query import Query
from redis.exceptions import RedisError

from embedding_index.config import IndexSettings, get_settings
from embedding_index.embeddings.models import EmbeddingResponse
from embedding_index.exceptions import ErrorCode, VectorStoreError
from embedding_index.logging_config import get_logger
from embedding_index.observability.metrics import (
    observe_store_operation,
    track_search_result,
)
from embedding_index.vectorstore.encoding import encode_vector
from embedding_index.vectorstore.errors import is_index_not_found, translate_error
from embedding_index.vectorstore.models import SearchDocument, SearchResult

logger = get_logger(__name__)

QUERY_PARAM = "vec"


def _profile_details(raw: Any) -> Any:
    """Unwrap FT.PROFILE details into plain data where the client wraps them."""
    return getattr(raw, "info", raw)


class SimilaritySearcher:
    """Runs KNN queries on a tenant index.

    Queries go through FT.PROFILE so execution statistics come back with
    the ranked documents.
    """

    def __init__(
        self,
        client: Redis,
        settings: IndexSettings | None = None,
    ) -> None:
        """Initialize the searcher.

        Args:
            client: Redis client, owned by the caller.
            settings: Index layout and query parameters.
        """
        self._client = client
        self._settings = settings or get_settings().index

    @property
    def score_field(self) -> str:
        """Field RediSearch fills with the vector distance."""
        return f"__{self._settings.vector_field}_score"

    def index_name(self, tenant: str) -> str:
        """Name of the index that belongs to ``tenant``."""
        return f"{self._settings.name_prefix}{tenant}"

    def build_query(self, k: int | None = None) -> Query:
        """KNN query over the vector field, closest first."""
        k = k or self._settings.knn_k
        return (
            Query(f"*=>[KNN {k} @{self._settings.vector_field} ${QUERY_PARAM}]")
            .sort_by(self.score_field, asc=True)
            .return_fields("title", "description", self.score_field)
            .paging(0, k)
            .dialect(self._settings.dialect)
        )

    def search_vector(self, tenant: str, vector: Sequence[float]) -> SearchResult:
        """Run one KNN query for a single vector.

        Raises:
            VectorStoreError: INDEX_NOT_FOUND if the tenant has no index,
                DIMENSION_MISMATCH if the vector size disagrees with it.
        """
        name = self.index_name(tenant)
        query = self.build_query()

        try:
            with observe_store_operation("search"):
                raw_result, raw_profile = self._client.ft(name).profile(
                    query,
                    query_params={QUERY_PARAM: encode_vector(vector)},
                )
        except RedisError as e:
            if is_index_not_found(e):
                raise VectorStoreError(
                    f"No index for tenant: {tenant}",
                    code=ErrorCode.INDEX_NOT_FOUND,
                    details={"index": name, "tenant": tenant},
                ) from e
            raise translate_error(e, f"search index {name}", {"index": name}) from e

        documents = [self._to_document(doc) for doc in raw_result.docs]
        track_search_result(
            len(documents),
            documents[0].score if documents else None,
        )

        logger.debug(
            f"Search returned {len(documents)} documents",
            extra={"index": name, "total": raw_result.total},
        )

        return SearchResult(
            index_name=name,
            total=raw_result.total,
            documents=documents,
            profile=_profile_details(raw_profile),
        )

    def query(
        self,
        tenant: str,
        query_embedding: EmbeddingResponse,
    ) -> SearchResult | None:
        """Search with every chunk of a query embedding, keeping the last result.

        Chunks are queried in order and each result replaces the previous
        one. Use ``query_merged`` to rank across all chunks instead.

        Returns:
            Result of the last chunk's query, or None when there are no chunks.
        """
        vectors = query_embedding.vectors()
        if len(vectors) > 1:
            logger.warning(
                f"Query has {len(vectors)} chunks; "
                f"results of the first {len(vectors) - 1} are discarded",
                extra={"tenant": tenant},
            )

        result: SearchResult | None = None
        for vector in vectors:
            result = self.search_vector(tenant, vector)
        return result

    def query_merged(
        self,
        tenant: str,
        query_embedding: EmbeddingResponse,
    ) -> SearchResult | None:
        """Search with every chunk and merge the rankings.

        A document matched by several chunks keeps its closest distance.
        The merged list is cut to ``knn_k`` documents.

        Returns:
            Merged result, or None when there are no chunks.
        """
        vectors = query_embedding.vectors()
        if not vectors:
            return None

        best: dict[str, SearchDocument] = {}
        profiles: list[Any] = []
        total = 0
        name = self.index_name(tenant)

        for vector in vectors:
            result = self.search_vector(tenant, vector)
            profiles.append(result.profile)
            total = max(total, result.total)
            for doc in result.documents:
                current = best.get(doc.id)
                if current is None or doc.score < current.score:
                    best[doc.id] = doc

        ranked = sorted(best.values(), key=lambda doc: doc.score)
        return SearchResult(
            index_name=name,
            total=total,
            documents=ranked[: self._settings.knn_k],
            profile=profiles,
        )

    def _to_document(self, doc: Any) -> SearchDocument:
        score = getattr(doc, self.score_field, None)
        if score is None:
            raise VectorStoreError(
                f"Search result for {doc.id} has no {self.score_field}",
                details={"document": doc.id},
            )
        return SearchDocument(
            id=doc.id,
            title=getattr(doc, "title", "") or "",
            description=getattr(doc, "description", "") or "",
            score=float(score),
        )
