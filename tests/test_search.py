"""Tests for similarity search."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from redis.commands.search.document import Document
from redis.exceptions import ResponseError

from embedding_index.config import IndexSettings
from embedding_index.embeddings.models import EmbeddingResponse
from embedding_index.exceptions import ErrorCode, VectorStoreError
from embedding_index.vectorstore.encoding import encode_vector
from embedding_index.vectorstore.search import SimilaritySearcher


def _doc(key: str, score: float, title: str = "Title") -> Document:
    return Document(
        key,
        title=title,
        description="Desc",
        **{"__embedding_score": str(score)},
    )


def _raw_result(*docs: Document) -> SimpleNamespace:
    return SimpleNamespace(total=len(docs), docs=list(docs))


def _create_searcher(
    *responses: tuple[SimpleNamespace, dict],
) -> tuple[SimilaritySearcher, MagicMock]:
    ft = MagicMock()
    ft.profile.side_effect = list(responses)
    client = MagicMock()
    client.ft = MagicMock(return_value=ft)
    return SimilaritySearcher(client, IndexSettings()), ft


class TestBuildQuery:
    """Tests for KNN query construction."""

    def test_query_string(self) -> None:
        """Query asks for the 10 nearest neighbours on the vector field."""
        searcher, _ = _create_searcher()
        query = searcher.build_query()
        assert query.query_string() == "*=>[KNN 10 @embedding $vec]"

    def test_query_args(self) -> None:
        """Query sorts by distance, returns display fields, uses dialect 2."""
        searcher, _ = _create_searcher()
        args = searcher.build_query().get_args()

        assert "SORTBY" in args
        sort_at = args.index("SORTBY")
        assert args[sort_at + 1 : sort_at + 3] == ["__embedding_score", "ASC"]

        return_at = args.index("RETURN")
        assert args[return_at + 1] == 3
        assert args[return_at + 2 : return_at + 5] == [
            "title",
            "description",
            "__embedding_score",
        ]

        dialect_at = args.index("DIALECT")
        assert args[dialect_at + 1] == 2

    def test_custom_k(self) -> None:
        """K comes from settings unless overridden."""
        searcher, _ = _create_searcher()
        assert "KNN 3 " in searcher.build_query(3).query_string()


class TestSearchVector:
    """Tests for single-vector search."""

    def test_returns_ranked_documents(self) -> None:
        """Documents keep the store ranking and carry scores."""
        searcher, ft = _create_searcher(
            (_raw_result(_doc("doc-0", 0.1), _doc("doc-1", 0.3)), {"Total profile time": "1"}),
        )

        result = searcher.search_vector("t1", [0.5, 0.5])

        assert result.index_name == "embeddings-t1"
        assert [d.id for d in result.documents] == ["doc-0", "doc-1"]
        assert result.documents[0].score == pytest.approx(0.1)
        assert result.documents[0].title == "Title"
        assert result.profile == {"Total profile time": "1"}

    def test_binds_encoded_vector(self) -> None:
        """The query vector is bound as encoded bytes."""
        searcher, ft = _create_searcher((_raw_result(), {}))

        searcher.search_vector("t1", [0.5, 0.25])

        params = ft.profile.call_args.kwargs["query_params"]
        assert params == {"vec": encode_vector([0.5, 0.25])}

    def test_missing_index(self) -> None:
        """Searching a tenant without an index raises INDEX_NOT_FOUND."""
        searcher, ft = _create_searcher()
        ft.profile.side_effect = ResponseError("embeddings-t9: no such index")

        with pytest.raises(VectorStoreError) as exc_info:
            searcher.search_vector("t9", [0.1])

        assert exc_info.value.code == ErrorCode.INDEX_NOT_FOUND
        assert exc_info.value.details["tenant"] == "t9"

    def test_dimension_mismatch(self) -> None:
        """Store rejection of the vector size surfaces as DIMENSION_MISMATCH."""
        searcher, ft = _create_searcher()
        ft.profile.side_effect = ResponseError(
            "query vector blob size (8) does not match index's expected size (6144)."
        )

        with pytest.raises(VectorStoreError) as exc_info:
            searcher.search_vector("t1", [0.1, 0.2])

        assert exc_info.value.code == ErrorCode.DIMENSION_MISMATCH


class TestQuery:
    """Tests for multi-chunk queries keeping the last result."""

    def test_empty_query(self) -> None:
        """No chunks means no search."""
        searcher, ft = _create_searcher()
        assert searcher.query("t1", EmbeddingResponse()) is None
        ft.profile.assert_not_called()

    def test_only_last_chunk_result_is_returned(self) -> None:
        """With three chunks the third chunk's result is returned."""
        first = (_raw_result(_doc("a-0", 0.1)), {"chunk": 1})
        second = (_raw_result(_doc("b-0", 0.1)), {"chunk": 2})
        third = (_raw_result(_doc("c-0", 0.4), _doc("c-1", 0.5)), {"chunk": 3})
        searcher, ft = _create_searcher(first, second, third)

        query = EmbeddingResponse.from_vectors([[0.1], [0.2], [0.3]])
        result = searcher.query("t1", query)

        assert ft.profile.call_count == 3
        assert [d.id for d in result.documents] == ["c-0", "c-1"]
        assert result.profile == {"chunk": 3}

        last_only, _ = _create_searcher(third)
        expected = last_only.search_vector("t1", [0.3])
        assert result == expected

    def test_chunks_queried_in_index_order(self) -> None:
        """Chunks run in index order, not list order."""
        searcher, ft = _create_searcher((_raw_result(), {}), (_raw_result(), {}))
        query = EmbeddingResponse.model_validate(
            {"data": [{"index": 1, "embedding": [0.9]}, {"index": 0, "embedding": [0.1]}]}
        )

        searcher.query("t1", query)

        blobs = [c.kwargs["query_params"]["vec"] for c in ft.profile.call_args_list]
        assert blobs == [encode_vector([0.1]), encode_vector([0.9])]


class TestQueryMerged:
    """Tests for merged multi-chunk queries."""

    def test_merges_and_ranks_by_distance(self) -> None:
        """Hits of every chunk are ranked together, closest first."""
        first = (_raw_result(_doc("a-0", 0.3), _doc("b-0", 0.6)), {"chunk": 1})
        second = (_raw_result(_doc("c-0", 0.2), _doc("a-0", 0.5)), {"chunk": 2})
        searcher, _ = _create_searcher(first, second)

        result = searcher.query_merged(
            "t1", EmbeddingResponse.from_vectors([[0.1], [0.2]])
        )

        assert [d.id for d in result.documents] == ["c-0", "a-0", "b-0"]
        assert result.documents[1].score == pytest.approx(0.3)
        assert result.profile == [{"chunk": 1}, {"chunk": 2}]

    def test_truncates_to_k(self) -> None:
        """Merged list is cut to K documents."""
        docs = [_doc(f"d-{i}", i / 100) for i in range(10)]
        more = [_doc(f"e-{i}", i / 100 + 0.005) for i in range(10)]
        searcher, _ = _create_searcher(
            (_raw_result(*docs), {}),
            (_raw_result(*more), {}),
        )

        result = searcher.query_merged(
            "t1", EmbeddingResponse.from_vectors([[0.1], [0.2]])
        )

        assert len(result.documents) == 10
        scores = [d.score for d in result.documents]
        assert scores == sorted(scores)

    def test_empty_query(self) -> None:
        """No chunks means no search."""
        searcher, _ = _create_searcher()
        assert searcher.query_merged("t1", EmbeddingResponse()) is None
