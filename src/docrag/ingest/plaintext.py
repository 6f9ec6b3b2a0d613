"""Plain text chunker: paragraph packing with fixed-window fallback."""

from __future__ import annotations

import re

from docrag.ingest.base import BaseChunker

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


class PlainTextChunker(BaseChunker):
    """Pack whole paragraphs into chunks of at most ``chunk_size`` tokens.

    Paragraphs are separated by blank lines and joined back with one blank
    line. A paragraph that alone exceeds ``chunk_size`` is split with the
    fixed-window splitter (overlap applies only there).
    """

    def chunk_text(self, text: str) -> list[str]:
        if not text.strip():
            return []

        paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]
        chunks: list[str] = []
        current: list[str] = []
        current_tokens = 0

        for para in paragraphs:
            tokens = self.count_tokens(para)
            if tokens > self.chunk_size:
                if current:
                    chunks.append("\n\n".join(current))
                    current, current_tokens = [], 0
                chunks.extend(self._split_fixed_window(para))
                continue
            if current and current_tokens + tokens > self.chunk_size:
                chunks.append("\n\n".join(current))
                current, current_tokens = [], 0
            current.append(para)
            current_tokens += tokens

        if current:
            chunks.append("\n\n".join(current))
        return chunks
