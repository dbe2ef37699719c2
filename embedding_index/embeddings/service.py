"""Embedding service interface and HTTP client implementation."""

import time
from abc import ABC, abstractmethod

import httpx

from embedding_index.config import EmbeddingSettings, get_settings
from embedding_index.embeddings.models import EmbeddingData, EmbeddingResponse
from embedding_index.exceptions import EmbeddingError, ErrorCode
from embedding_index.logging_config import get_logger
from embedding_index.observability.metrics import track_embedding_request

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Defines the interface for generating text embeddings.
    """

    @abstractmethod
    def embed(self, texts: list[str]) -> EmbeddingResponse:
        """Generate one embedding chunk per text.

        Args:
            texts: Texts to embed, in chunk order.

        Returns:
            EmbeddingResponse whose chunk indexes follow the input order.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...


class HTTPEmbeddingService(EmbeddingService):
    """Embedding service using an OpenAI-compatible HTTP API."""

    def __init__(
        self,
        settings: EmbeddingSettings | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the HTTP embedding service.

        Args:
            settings: Embedding configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings or get_settings().embedding
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {}
            if self._settings.api_key:
                headers["Authorization"] = (
                    f"Bearer {self._settings.api_key.get_secret_value()}"
                )
            self._client = httpx.Client(
                timeout=self._settings.timeout,
                headers=headers,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    def embed(self, texts: list[str]) -> EmbeddingResponse:
        """Generate embeddings for the given texts.

        Texts are sent in batches of ``batch_size``; chunk indexes are
        renumbered so they stay continuous across batches.
        """
        if not texts:
            return EmbeddingResponse(model=self._settings.model)

        client = self._get_client()
        url = f"{self._settings.base_url}/embeddings"

        data: list[EmbeddingData] = []
        prompt_tokens = 0
        batch_size = self._settings.batch_size

        for start in range(0, len(texts), batch_size):
            batch = texts[start : start + batch_size]
            payload = self._embed_batch_request(client, url, batch)

            for offset, vector in enumerate(payload["vectors"]):
                data.append(EmbeddingData(index=start + offset, embedding=vector))
            prompt_tokens += payload["prompt_tokens"]

        return EmbeddingResponse(
            data=data,
            model=self._settings.model,
            usage={"prompt_tokens": prompt_tokens, "total_tokens": prompt_tokens},
        )

    def _embed_batch_request(
        self,
        client: httpx.Client,
        url: str,
        texts: list[str],
    ) -> dict:
        """Make embedding request for a batch.

        Args:
            client: HTTP client.
            url: Embedding endpoint URL.
            texts: Batch of texts.

        Returns:
            Dict with the batch ``vectors`` in input order and ``prompt_tokens``.

        Raises:
            EmbeddingError: If request fails.
        """
        request_body = {
            "input": texts,
            "model": self._settings.model,
        }

        start_time = time.perf_counter()
        try:
            response = client.post(url, json=request_body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            track_embedding_request(
                self._settings.model,
                time.perf_counter() - start_time,
                len(texts),
                success=False,
            )
            logger.error(
                f"Embedding request failed: {e.response.status_code}",
                extra={"url": url, "status": e.response.status_code},
            )
            raise EmbeddingError(
                f"Embedding service returned {e.response.status_code}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            track_embedding_request(
                self._settings.model,
                time.perf_counter() - start_time,
                len(texts),
                success=False,
            )
            logger.error(
                f"Embedding request error: {e}",
                extra={"url": url},
            )
            raise EmbeddingError(
                f"Failed to connect to embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"url": url},
            ) from e

        track_embedding_request(
            self._settings.model,
            time.perf_counter() - start_time,
            len(texts),
        )

        try:
            body = response.json()
            items = sorted(body["data"], key=lambda item: item.get("index", 0))
            vectors = [item["embedding"] for item in items]
            if len(vectors) != len(texts):
                raise ValueError(
                    f"expected {len(texts)} embeddings, got {len(vectors)}"
                )
            usage = body.get("usage") or {}

            return {
                "vectors": vectors,
                "prompt_tokens": int(usage.get("prompt_tokens", 0)),
            }

        except (KeyError, TypeError, ValueError) as e:
            raise EmbeddingError(
                f"Invalid response from embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e
