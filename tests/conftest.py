"""Pytest configuration and shared fixtures."""

import re
from collections.abc import AsyncGenerator
from types import SimpleNamespace
from typing import Any

import numpy as np
import pytest
from httpx import ASGITransport, AsyncClient
from redis.commands.search.document import Document
from redis.exceptions import ResponseError

from embedding_index.api.app import app
from embedding_index.config import IndexSettings
from embedding_index.vectorstore.encoding import decode_vector


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for FastAPI app.

    Yields:
        AsyncClient configured for testing.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def index_settings() -> IndexSettings:
    """Index settings with the production defaults."""
    return IndexSettings()


def unit_vector(position: int, dimensions: int = 1536) -> list[float]:
    """Vector with a single 1.0 component."""
    vector = [0.0] * dimensions
    vector[position] = 1.0
    return vector


class FakeSearch:
    """In-memory stand-in for one RediSearch index handle."""

    def __init__(self, store: "FakeRedis", name: str) -> None:
        self._store = store
        self._name = name

    def search(self, query: Any) -> SimpleNamespace:
        self._require_index()
        return SimpleNamespace(total=len(self._documents()), docs=[])

    def create_index(self, fields: list[Any], definition: Any = None) -> None:
        if self._name in self._store.indexes:
            raise ResponseError("Index already exists")
        vector_field = next(f for f in fields if f.args[0] == "VECTOR")
        dim = vector_field.args[vector_field.args.index("DIM") + 1]
        self._store.indexes[self._name] = {"dim": int(dim)}
        self._store.create_calls += 1

    def dropindex(self, delete_documents: bool = False) -> None:
        self._require_index()
        del self._store.indexes[self._name]

    def profile(
        self,
        query: Any,
        limited: bool = False,
        query_params: dict[str, Any] | None = None,
    ) -> tuple[SimpleNamespace, dict[str, Any]]:
        self._require_index()
        blob = (query_params or {})["vec"]
        expected = self._store.indexes[self._name]["dim"] * 4
        if len(blob) != expected:
            raise ResponseError(
                "Error parsing vector similarity query: query vector blob size "
                f"({len(blob)}) does not match index's expected size ({expected})."
            )

        k = int(re.search(r"KNN (\d+)", query.query_string()).group(1))
        target = np.array(decode_vector(blob))

        scored = []
        for key, fields in self._documents():
            vector = np.array(decode_vector(fields["embedding"]))
            similarity = float(
                np.dot(vector, target) / (np.linalg.norm(vector) * np.linalg.norm(target))
            )
            scored.append((1.0 - similarity, key, fields))
        scored.sort(key=lambda item: item[0])

        docs = [
            Document(
                key,
                title=fields["title"],
                description=fields["description"],
                **{"__embedding_score": str(distance)},
            )
            for distance, key, fields in scored[:k]
        ]
        return (
            SimpleNamespace(total=len(scored), docs=docs),
            {"Total profile time": "0.1"},
        )

    def _documents(self) -> list[tuple[str, dict[str, Any]]]:
        dim = self._store.indexes[self._name]["dim"]
        return [
            (key, fields)
            for key, fields in sorted(self._store.hashes.items())
            if len(fields.get("embedding", b"")) == dim * 4
        ]

    def _require_index(self) -> None:
        if self._name not in self._store.indexes:
            raise ResponseError(f"{self._name}: no such index")


class FakeRedis:
    """In-memory stand-in for the Redis client calls the service makes."""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, Any]] = {}
        self.indexes: dict[str, dict[str, Any]] = {}
        self.create_calls = 0
        self.closed = False

    def ft(self, index_name: str) -> FakeSearch:
        return FakeSearch(self, index_name)

    def hset(self, key: str, mapping: dict[str, Any]) -> int:
        existing = self.hashes.setdefault(key, {})
        added = len(set(mapping) - set(existing))
        existing.update(mapping)
        return added

    def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self.hashes.pop(key, None) is not None)

    def flushall(self) -> bool:
        self.hashes.clear()
        self.indexes.clear()
        return True

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Empty in-memory Redis double."""
    return FakeRedis()


@pytest.fixture
def make_vector() -> Any:
    """Factory for one-hot vectors of the index dimension."""
    return unit_vector
