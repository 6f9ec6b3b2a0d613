"""Ingestion: parsing, chunking, embedding and the processing pipeline."""

from docrag.ingest.base import BaseChunker
from docrag.ingest.embedder import EmbeddingConfig, EmbeddingError, LiteLLMEmbeddingProvider
from docrag.ingest.library import DocumentImportError, DocumentLibrary
from docrag.ingest.parser import DocumentParseError, DocumentParser, UnsupportedDocumentError
from docrag.ingest.pipeline import DocumentProcessingPipeline, ProcessingStatus
from docrag.ingest.plaintext import PlainTextChunker

__all__ = [
    "BaseChunker",
    "DocumentImportError",
    "DocumentLibrary",
    "DocumentParseError",
    "DocumentParser",
    "DocumentProcessingPipeline",
    "EmbeddingConfig",
    "EmbeddingError",
    "LiteLLMEmbeddingProvider",
    "PlainTextChunker",
    "ProcessingStatus",
    "UnsupportedDocumentError",
]
