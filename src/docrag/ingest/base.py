"""Base chunker interface for docrag text chunkers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from docrag.db.models import DocumentChunk


class BaseChunker(ABC):
    """Abstract base for all chunkers.

    Subclasses implement ``chunk_text()`` and may use ``_split_fixed_window()``
    for the fixed-window path. ``create_chunks()`` is shared.

    Token counting uses a 4-chars-per-token approximation; no external
    tokenizer dependency is required.
    """

    def __init__(self, chunk_size: int = 512, overlap: float = 0.10) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if not 0.0 <= overlap < 1.0:
            raise ValueError("overlap must be in [0.0, 1.0)")
        self.chunk_size = chunk_size
        self.overlap = overlap

    @abstractmethod
    def chunk_text(self, text: str) -> list[str]:
        """Split *text* into an ordered list of non-empty chunk strings."""

    def create_chunks(self, document_id: str, texts: list[str]) -> list[DocumentChunk]:
        """Convert *texts* into DocumentChunks with contiguous indices 0..n-1."""
        return [
            DocumentChunk(document_id=document_id, text=t, index=i)
            for i, t in enumerate(texts)
        ]

    @staticmethod
    def count_tokens(text: str) -> int:
        """Approximate token count: 4 characters ≈ 1 token."""
        return max(1, len(text) // 4)

    def _split_fixed_window(self, text: str) -> list[str]:
        """Split *text* into fixed-window segments with overlap.

        Window size = ``self.chunk_size * 4`` characters.
        Overlap     = ``self.overlap`` fraction of window size.
        Segments are stripped; empty segments are omitted.
        """
        if not text.strip():
            return []

        char_size = self.chunk_size * 4
        overlap_chars = int(char_size * self.overlap)
        step = max(1, char_size - overlap_chars)

        segments: list[str] = []
        pos = 0
        length = len(text)

        while pos < length:
            end = min(pos + char_size, length)
            segment = text[pos:end].strip()
            if segment:
                segments.append(segment)
            if end >= length:
                break
            pos += step

        return segments
