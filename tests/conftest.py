"""Shared pytest fixtures."""

from __future__ import annotations

import os

# Use litellm's bundled model cost map; its remote fetch can deadlock imports offline.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

import pytest

from docrag.db.connection import Database
from docrag.db.models import DocumentChunk, SimilarityHit
from docrag.db.schema import initialize
from docrag.db.store import DocumentStore


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / ".docrag.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture
def store(tmp_db):
    return DocumentStore(tmp_db)


class FakeEmbedder:
    """Deterministic EmbeddingProvider that records every call."""

    def __init__(self, dimensions: int = 3, fail_on_batch: int | None = None) -> None:
        self.dimensions = dimensions
        self.fail_on_batch = fail_on_batch
        self.embed_calls: list[str] = []
        self.batch_calls: list[list[str]] = []

    def _vector(self, text: str) -> list[float]:
        return [float(len(text))] + [0.5] * (self.dimensions - 1)

    async def embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        return self._vector(text)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.batch_calls.append(list(texts))
        if self.fail_on_batch is not None and len(self.batch_calls) == self.fail_on_batch:
            raise RuntimeError("embedding backend unavailable")
        return [self._vector(t) for t in texts]


class FakeIndex:
    """SimilarityIndex returning the same cached hit objects on every search."""

    def __init__(self, hits: list[SimilarityHit] | None = None) -> None:
        self.hits = hits or []
        self.stored: list[tuple[DocumentChunk, list[float]]] = []
        self.search_calls: list[tuple[list[float], int]] = []

    async def store(self, chunk: DocumentChunk, vector: list[float]) -> None:
        self.stored.append((chunk, vector))

    async def search(self, vector: list[float], top_n: int) -> list[SimilarityHit]:
        self.search_calls.append((vector, top_n))
        return self.hits[:top_n]


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def fake_index():
    return FakeIndex()


@pytest.fixture
def make_index():
    """Factory: build a FakeIndex preloaded with hits."""
    return FakeIndex


@pytest.fixture
def make_embedder():
    """Factory: build a FakeEmbedder with custom dimensions / failure point."""
    return FakeEmbedder
