"""Document processing pipeline: parse → chunk → embed → index.

Status transitions per document:
  imported/failed → processing → processed   (success)
                              → failed      (any parse/chunk/embed/index error)

Chunks created before a failure are left in place; DocumentLibrary.reset_document()
clears them before a document is resubmitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from docrag.db.models import Document, DocumentChunk, DocumentStatus, utcnow
from docrag.db.store import DocumentStore
from docrag.ingest.embedder import EmbeddingError
from docrag.rag.protocols import (
    DocumentParser,
    EmbeddingProvider,
    SimilarityIndex,
    TextChunker,
)

logger = logging.getLogger(__name__)

EMBEDDING_BATCH_SIZE = 10

_PROGRESS_TEXT = {
    DocumentStatus.IMPORTED: "Ready to process",
    DocumentStatus.PROCESSING: "Processing...",
    DocumentStatus.PROCESSED: "Ready for RAG",
    DocumentStatus.FAILED: "Processing failed",
}


@dataclass(frozen=True)
class ProcessingStatus:
    document: Document
    is_processing: bool
    is_complete: bool
    has_error: bool

    @property
    def progress_text(self) -> str:
        return _PROGRESS_TEXT[self.document.status]


class DocumentProcessingPipeline:
    """Turn registered documents into indexed chunks.

    Args:
        store: Open DocumentStore; document status and chunks are written here.
        parser: Extracts raw text from a document.
        chunker: Splits text and builds DocumentChunk rows.
        embedder: Produces one vector per chunk text.
        index: Receives (chunk, vector) pairs.
        batch_size: Chunks per embedding request.
    """

    def __init__(
        self,
        store: DocumentStore,
        parser: DocumentParser,
        chunker: TextChunker,
        embedder: EmbeddingProvider,
        index: SimilarityIndex,
        batch_size: int = EMBEDDING_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._store = store
        self._parser = parser
        self._chunker = chunker
        self._embedder = embedder
        self._index = index
        self._batch_size = batch_size

    async def process_document(self, document: Document) -> None:
        """Process one document; re-raise the original error after marking it failed."""
        document.status = DocumentStatus.PROCESSING
        self._persist(document)
        logger.info("Processing document %s ('%s')", document.id, document.name)

        try:
            text = self._parser.parse_text(document)
            texts = self._chunker.chunk_text(text)
            chunks = self._chunker.create_chunks(document.id, texts)
            for chunk in chunks:
                self._store.insert(chunk)
            await self._embed_and_index(chunks)
        except Exception:
            document.status = DocumentStatus.FAILED
            self._persist(document)
            logger.info("Processing failed for document %s", document.id)
            raise

        document.status = DocumentStatus.PROCESSED
        document.processed_at = utcnow()
        document.chunk_count = len(chunks)
        self._persist(document)
        logger.info("Processed document %s: %d chunks", document.id, len(chunks))

    async def process_documents(self, documents: list[Document]) -> None:
        """Process *documents* in order, stopping at the first failure.

        Documents after the failing one are left untouched. Callers that want
        best-effort behaviour must call process_document() per document.
        """
        for document in documents:
            await self.process_document(document)

    @staticmethod
    def processing_status(document: Document) -> ProcessingStatus:
        return ProcessingStatus(
            document=document,
            is_processing=document.status is DocumentStatus.PROCESSING,
            is_complete=document.status is DocumentStatus.PROCESSED,
            has_error=document.status is DocumentStatus.FAILED,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _embed_and_index(self, chunks: list[DocumentChunk]) -> None:
        for start in range(0, len(chunks), self._batch_size):
            batch = chunks[start : start + self._batch_size]
            vectors = await self._embedder.embed_batch([c.text for c in batch])
            if len(vectors) != len(batch):
                raise EmbeddingError(
                    f"Embedding batch returned {len(vectors)} vectors for {len(batch)} chunks"
                )
            for chunk, vector in zip(batch, vectors):
                await self._index.store(chunk, vector)

    def _persist(self, document: Document) -> None:
        self._store.update(document)
        self._store.save()
