"""Vector store data models."""

from typing import Any

from pydantic import BaseModel, Field


def record_key(batch_key: str, chunk_index: int) -> str:
    """Build the hash key of one chunk of a batch."""
    return f"{batch_key}-{chunk_index}"


class EmbeddingRecord(BaseModel):
    """One embedding chunk stored as a Redis hash.

    Attributes:
        key: Hash key, ``{batch_key}-{index}``.
        index: Position of the chunk within its batch.
        title: Title of the source document.
        description: Description of the source document.
        embedding: Encoded vector bytes.
    """

    key: str = Field(description="Hash key")
    index: int = Field(ge=0, description="Chunk position within the batch")
    title: str = Field(description="Source document title")
    description: str = Field(description="Source document description")
    embedding: bytes = Field(description="Encoded float32 vector")

    def to_mapping(self) -> dict[str, str | bytes]:
        """Field map written with HSET."""
        return {
            "index": str(self.index),
            "title": self.title,
            "description": self.description,
            "embedding": self.embedding,
        }


class SearchDocument(BaseModel):
    """A ranked hit from a KNN query.

    Attributes:
        id: Hash key of the matching record.
        title: Stored title.
        description: Stored description.
        score: Cosine distance to the query vector (lower is closer).
    """

    id: str = Field(description="Record key")
    title: str = Field(default="", description="Record title")
    description: str = Field(default="", description="Record description")
    score: float = Field(description="Cosine distance to the query")

    @property
    def similarity(self) -> float:
        """Cosine similarity (higher is more similar)."""
        return 1.0 - self.score


class SearchResult(BaseModel):
    """Ranked documents of a similarity search with store diagnostics.

    Attributes:
        index_name: Index that was searched.
        total: Total matches reported by the store.
        documents: Documents ordered from closest to farthest.
        profile: Execution statistics reported by FT.PROFILE.
    """

    index_name: str = Field(description="Searched index")
    total: int = Field(default=0, description="Total matches reported")
    documents: list[SearchDocument] = Field(
        default_factory=list,
        description="Ranked documents",
    )
    profile: Any = Field(default=None, description="Store profiling output")
