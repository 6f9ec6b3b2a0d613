"""Tests for DocumentLibrary."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from docrag.db.models import (
    Conversation,
    ConversationDocument,
    Document,
    DocumentChunk,
    DocumentStatus,
)
from docrag.db.vectors import SqliteVecIndex
from docrag.ingest.library import DocumentImportError, DocumentLibrary, kind_for
from docrag.rag.conversations import ConversationDocuments


@pytest.fixture
def index(tmp_db):
    return SqliteVecIndex.for_model(tmp_db, "test/model", dimensions=3)


@pytest.fixture
def library(store, index):
    return DocumentLibrary(store, index)


@pytest.fixture
def notes(tmp_path) -> Path:
    f = tmp_path / "notes.txt"
    f.write_text("some notes", encoding="utf-8")
    return f


@pytest.mark.parametrize(
    "name,kind",
    [
        ("a.pdf", "pdf"),
        ("a.PDF", "pdf"),
        ("a.txt", "txt"),
        ("a.md", "md"),
        ("a.markdown", "md"),
        ("a.docx", "docx"),
        ("a.rtf", "rtf"),
        ("a.exe", None),
        ("README", None),
    ],
)
def test_kind_for(name, kind):
    assert kind_for(Path(name)) == kind


class TestRegister:
    def test_register_document(self, library, store, notes):
        doc = library.register_document(notes)

        stored = store.get(Document, doc.id)
        assert stored.name == "notes.txt"
        assert stored.kind == "txt"
        assert stored.status is DocumentStatus.IMPORTED
        assert stored.size_bytes == len("some notes")
        assert stored.locator == str(notes.resolve())

    def test_register_accepts_str(self, library, notes):
        assert library.register_document(str(notes)).name == "notes.txt"

    def test_unsupported_extension(self, library, tmp_path):
        f = tmp_path / "tool.exe"
        f.write_bytes(b"MZ")
        with pytest.raises(DocumentImportError, match="Unsupported file type"):
            library.register_document(f)

    def test_missing_file(self, library, tmp_path):
        with pytest.raises(DocumentImportError, match="File not found"):
            library.register_document(tmp_path / "gone.pdf")

    def test_import_documents_skips_failures(self, library, store, notes, tmp_path, caplog):
        bad = tmp_path / "bad.exe"
        bad.write_bytes(b"")

        with caplog.at_level(logging.ERROR, logger="docrag.ingest.library"):
            docs = library.import_documents([notes, bad, tmp_path / "missing.md"])

        assert [d.name for d in docs] == ["notes.txt"]
        assert store.count(Document) == 1
        assert len(caplog.records) == 2


class TestQueries:
    def test_list_documents_by_status(self, library, store, notes):
        doc = library.register_document(notes)
        other = library.register_document(notes)
        other.status = DocumentStatus.PROCESSED
        store.update(other)

        assert len(library.list_documents()) == 2
        assert [d.id for d in library.list_documents(DocumentStatus.IMPORTED)] == [doc.id]

    def test_find_by_id_then_name(self, library, notes):
        doc = library.register_document(notes)
        assert library.find_document(doc.id).id == doc.id
        assert library.find_document("notes.txt").id == doc.id
        assert library.find_document("nope") is None


async def _index_chunks(store, index, doc: Document, n: int) -> None:
    for i in range(n):
        chunk = DocumentChunk(document_id=doc.id, text=f"chunk {i}", index=i)
        store.insert(chunk)
        await index.store(chunk, [1.0, float(i), 0.5])
    store.save()


class TestCascade:
    @pytest.mark.asyncio
    async def test_reset_document(self, library, store, index, notes):
        doc = library.register_document(notes)
        await _index_chunks(store, index, doc, 3)
        doc.status = DocumentStatus.FAILED
        doc.chunk_count = 3
        store.update(doc)

        removed = library.reset_document(doc)

        assert removed == 3
        stored = store.get(Document, doc.id)
        assert stored.status is DocumentStatus.IMPORTED
        assert stored.chunk_count == 0
        assert stored.processed_at is None
        assert store.count(DocumentChunk) == 0
        assert index.count(doc.id) == 0

    @pytest.mark.asyncio
    async def test_delete_document_cascades(self, library, store, index, notes):
        doc = library.register_document(notes)
        keep = library.register_document(notes)
        await _index_chunks(store, index, doc, 2)
        await _index_chunks(store, index, keep, 1)
        links = ConversationDocuments(store)
        conv = Conversation(id="c1")
        links.add_document_to_conversation(doc, conv)
        links.add_document_to_conversation(keep, conv)

        removed = library.delete_document(doc)

        assert removed == 2
        assert store.get(Document, doc.id) is None
        assert store.fetch(DocumentChunk, document_id=doc.id) == []
        assert index.count(doc.id) == 0
        assert index.count(keep.id) == 1
        assert [cd.document_id for cd in store.fetch(ConversationDocument)] == [keep.id]

    def test_delete_without_index(self, store, notes):
        library = DocumentLibrary(store)
        doc = library.register_document(notes)
        assert library.delete_document(doc) == 0
        assert store.count(Document) == 0
