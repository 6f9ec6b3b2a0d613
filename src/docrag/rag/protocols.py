"""Collaborator protocols consumed by the ingestion and retrieval pipelines.

Concrete implementations are injected at construction time so tests can
substitute deterministic vectors and scores.
"""

from __future__ import annotations

from typing import Protocol

from docrag.db.models import Document, DocumentChunk, SimilarityHit


class DocumentParser(Protocol):
    def parse_text(self, document: Document) -> str:
        """Return the document's plain text; raise on unreadable content."""
        ...


class TextChunker(Protocol):
    def chunk_text(self, text: str) -> list[str]:
        ...

    def create_chunks(self, document_id: str, texts: list[str]) -> list[DocumentChunk]:
        """Wrap *texts* as chunks of *document_id* with contiguous indices."""
        ...


class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> list[float]:
        ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per input text, index-aligned."""
        ...


class SimilarityIndex(Protocol):
    async def store(self, chunk: DocumentChunk, vector: list[float]) -> None:
        ...

    async def search(self, vector: list[float], top_n: int) -> list[SimilarityHit]:
        """Return up to *top_n* hits ordered by descending similarity."""
        ...


__all__ = ["DocumentParser", "EmbeddingProvider", "SimilarityIndex", "TextChunker"]
