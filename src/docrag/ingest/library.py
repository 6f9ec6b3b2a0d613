"""Document library: registration, bulk import and cascading deletion.

Registration records a file where it already lives (the locator is the
resolved path); copying files into managed storage is left to the caller.
"""

from __future__ import annotations

import logging
from pathlib import Path

from docrag.db.models import (
    ConversationDocument,
    Document,
    DocumentChunk,
    DocumentStatus,
)
from docrag.db.store import DocumentStore
from docrag.db.vectors import SqliteVecIndex

logger = logging.getLogger(__name__)

# extension → stored document kind
SUPPORTED_KINDS: dict[str, str] = {
    ".pdf": "pdf",
    ".txt": "txt",
    ".md": "md",
    ".markdown": "md",
    ".docx": "docx",
    ".rtf": "rtf",
}


class DocumentImportError(ValueError):
    """Raised when a file cannot be registered as a document."""


def kind_for(path: Path) -> str | None:
    return SUPPORTED_KINDS.get(path.suffix.lower())


class DocumentLibrary:
    """Owner of Document lifecycle outside the processing pipeline.

    Args:
        store: Open DocumentStore.
        index: Vector index whose entries are removed alongside a document's
            chunks. Optional for read-only or registration-only use.
    """

    def __init__(self, store: DocumentStore, index: SqliteVecIndex | None = None) -> None:
        self._store = store
        self._index = index

    def register_document(self, path: Path | str) -> Document:
        """Insert an ``imported`` Document for the file at *path* and commit.

        Raises:
            DocumentImportError: If the extension is unsupported or the path is
                not a readable file.
        """
        path = Path(path)
        kind = kind_for(path)
        if kind is None:
            raise DocumentImportError(
                f"Unsupported file type '{path.suffix or path.name}'. "
                f"Supported: {', '.join(sorted(SUPPORTED_KINDS))}"
            )
        if not path.is_file():
            raise DocumentImportError(f"File not found: '{path}'")

        document = Document(
            name=path.name,
            locator=str(path.resolve()),
            kind=kind,
            size_bytes=path.stat().st_size,
        )
        self._store.insert(document)
        self._store.save()
        return document

    def import_documents(self, paths: list[Path | str]) -> list[Document]:
        """Register every path it can; failures are logged and skipped."""
        documents: list[Document] = []
        for path in paths:
            try:
                documents.append(self.register_document(path))
            except (DocumentImportError, OSError) as exc:
                logger.error("Failed to import document %s: %s", path, exc)
        return documents

    def list_documents(self, status: DocumentStatus | None = None) -> list[Document]:
        if status is None:
            return self._store.fetch(Document)
        return self._store.fetch(Document, status=status)

    def find_document(self, ref: str) -> Document | None:
        """Look up a document by id, then by display name (first match)."""
        document = self._store.get(Document, ref)
        if document is not None:
            return document
        matches = self._store.fetch(Document, name=ref)
        return matches[0] if matches else None

    def reset_document(self, document: Document) -> int:
        """Drop a document's chunks and vectors and mark it ``imported`` again.

        Returns the number of chunks removed.
        """
        removed = self._purge_chunks(document)
        document.status = DocumentStatus.IMPORTED
        document.processed_at = None
        document.chunk_count = 0
        self._store.update(document)
        self._store.save()
        return removed

    def delete_document(self, document: Document) -> int:
        """Delete a document with its chunks, vectors and conversation links.

        Returns the number of chunks removed.
        """
        removed = self._purge_chunks(document)
        self._store.delete_where(ConversationDocument, document_id=document.id)
        self._store.delete(document)
        self._store.save()
        return removed

    def _purge_chunks(self, document: Document) -> int:
        if self._index is not None:
            self._index.delete_document(document.id)
        return self._store.delete_where(DocumentChunk, document_id=document.id)
