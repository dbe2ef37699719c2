"""Embedding data models.

Shapes follow the OpenAI-compatible ``/embeddings`` response.
"""

from typing import Any

from pydantic import BaseModel, Field


class EmbeddingData(BaseModel):
    """One embedding chunk of a response.

    Attributes:
        index: Position of the chunk within the response.
        embedding: The embedding vector.
        object: Object type reported by the service.
    """

    index: int = Field(ge=0, description="Chunk position within the response")
    embedding: list[float] = Field(description="Embedding vector")
    object: str = Field(default="embedding", description="Object type")


class EmbeddingResponse(BaseModel):
    """Ordered embedding chunks produced for one input document.

    Attributes:
        data: Embedding chunks.
        model: The model used to generate the embeddings.
        usage: Token usage reported by the service.
    """

    data: list[EmbeddingData] = Field(
        default_factory=list,
        description="Embedding chunks",
    )
    model: str = Field(default="", description="Model used for embedding")
    usage: dict[str, Any] = Field(
        default_factory=dict,
        description="Token usage",
    )

    def vectors(self) -> list[list[float]]:
        """Return the chunk vectors ordered by chunk index."""
        return [item.embedding for item in sorted(self.data, key=lambda d: d.index)]

    @classmethod
    def from_vectors(
        cls,
        vectors: list[list[float]],
        model: str = "",
    ) -> "EmbeddingResponse":
        """Build a response from plain vectors, numbering chunks in order."""
        return cls(
            data=[
                EmbeddingData(index=i, embedding=vector)
                for i, vector in enumerate(vectors)
            ],
            model=model,
        )
