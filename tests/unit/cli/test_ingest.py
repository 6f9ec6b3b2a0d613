"""Tests for docrag add and docrag process."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from docrag.cli.main import app
from docrag.db.models import Document, DocumentChunk, DocumentStatus

runner = CliRunner()


def _by_name(store) -> dict[str, Document]:
    return {d.name: d for d in store.fetch(Document)}


# ---------------------------------------------------------------------------
# docrag add
# ---------------------------------------------------------------------------


def test_add_no_process_registers_only(project: Path, write_file, open_store, mock_embedding) -> None:
    path = write_file("notes.txt")

    result = runner.invoke(app, ["add", str(path), "--no-process"])

    assert result.exit_code == 0, result.output
    assert "Added notes.txt" in result.output
    doc = _by_name(open_store())["notes.txt"]
    assert doc.status is DocumentStatus.IMPORTED
    mock_embedding.assert_not_awaited()


def test_add_processes_document(project: Path, write_file, open_store, mock_embedding) -> None:
    path = write_file("notes.md", "# Title\n\nFirst paragraph.\n\nSecond paragraph.")

    result = runner.invoke(app, ["add", str(path)])

    assert result.exit_code == 0, result.output
    store = open_store()
    doc = _by_name(store)["notes.md"]
    assert doc.status is DocumentStatus.PROCESSED
    assert doc.chunk_count == store.count(DocumentChunk, document_id=doc.id) >= 1
    mock_embedding.assert_awaited()


def test_add_unsupported_only_exits_1(project: Path, write_file) -> None:
    path = write_file("tool.exe")

    result = runner.invoke(app, ["add", str(path)])

    assert result.exit_code == 1
    assert "Unsupported file type" in result.output


def test_add_missing_file_exits_1(project: Path) -> None:
    result = runner.invoke(app, ["add", str(project / "gone.txt")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_add_without_api_key(
    project: Path, write_file, open_store, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    path = write_file("notes.txt")

    result = runner.invoke(app, ["add", str(path)])

    assert result.exit_code == 1
    assert "OPENAI_API_KEY" in result.output
    assert _by_name(open_store())["notes.txt"].status is DocumentStatus.IMPORTED


def test_add_embedding_failure_marks_failed(
    project: Path, write_file, open_store, mock_embedding
) -> None:
    mock_embedding.side_effect = RuntimeError("rate limited")
    path = write_file("notes.txt")

    result = runner.invoke(app, ["add", str(path)])

    assert result.exit_code == 1
    assert "Processing failed" in result.output
    assert _by_name(open_store())["notes.txt"].status is DocumentStatus.FAILED


# ---------------------------------------------------------------------------
# docrag process
# ---------------------------------------------------------------------------


def test_process_no_db_exits_1(project: Path) -> None:
    result = runner.invoke(app, ["process", "--db", str(project / "missing.db")])

    assert result.exit_code == 1
    assert "docrag init" in result.output


def test_process_nothing_pending(project: Path) -> None:
    runner.invoke(app, ["init"])

    result = runner.invoke(app, ["process"])

    assert result.exit_code == 0
    assert "Nothing to process" in result.output


def test_process_pending_documents(project: Path, write_file, open_store, mock_embedding) -> None:
    runner.invoke(app, ["add", str(write_file("a.txt")), str(write_file("b.txt")), "--no-process"])

    result = runner.invoke(app, ["process"])

    assert result.exit_code == 0, result.output
    docs = _by_name(open_store())
    assert docs["a.txt"].status is DocumentStatus.PROCESSED
    assert docs["b.txt"].status is DocumentStatus.PROCESSED


def test_process_stops_at_first_failure(project: Path, write_file, open_store, mock_embedding) -> None:
    # docx is accepted at import but has no text extractor
    bad = project / "report.docx"
    bad.write_bytes(b"PK\x03\x04")
    runner.invoke(app, ["add", str(bad), "--no-process"])
    runner.invoke(app, ["add", str(write_file("notes.txt")), "--no-process"])

    result = runner.invoke(app, ["process"])

    assert result.exit_code == 1
    assert "report.docx" in result.output
    docs = _by_name(open_store())
    assert docs["report.docx"].status is DocumentStatus.FAILED
    assert docs["notes.txt"].status is DocumentStatus.IMPORTED


def test_process_keep_going(project: Path, write_file, open_store, mock_embedding) -> None:
    bad = project / "report.docx"
    bad.write_bytes(b"PK\x03\x04")
    runner.invoke(app, ["add", str(bad), "--no-process"])
    runner.invoke(app, ["add", str(write_file("notes.txt")), "--no-process"])

    result = runner.invoke(app, ["process", "--keep-going"])

    assert result.exit_code == 1
    docs = _by_name(open_store())
    assert docs["report.docx"].status is DocumentStatus.FAILED
    assert docs["notes.txt"].status is DocumentStatus.PROCESSED


def test_process_retry_failed(
    project: Path, write_file, open_store, mock_embedding, embedding_response
) -> None:
    mock_embedding.side_effect = RuntimeError("rate limited")
    runner.invoke(app, ["add", str(write_file("notes.txt"))])

    plain = runner.invoke(app, ["process"])
    assert "Nothing to process" in plain.output

    mock_embedding.side_effect = embedding_response
    result = runner.invoke(app, ["process", "--retry-failed"])

    assert result.exit_code == 0, result.output
    doc = _by_name(open_store())["notes.txt"]
    assert doc.status is DocumentStatus.PROCESSED


def test_process_single_document_by_name(
    project: Path, write_file, open_store, mock_embedding
) -> None:
    runner.invoke(app, ["add", str(write_file("a.txt")), str(write_file("b.txt")), "--no-process"])

    result = runner.invoke(app, ["process", "--document", "b.txt"])

    assert result.exit_code == 0, result.output
    docs = _by_name(open_store())
    assert docs["a.txt"].status is DocumentStatus.IMPORTED
    assert docs["b.txt"].status is DocumentStatus.PROCESSED


def test_process_reprocess_replaces_chunks(
    project: Path, write_file, open_store, mock_embedding
) -> None:
    runner.invoke(app, ["add", str(write_file("a.txt"))])
    first = _by_name(open_store())["a.txt"]

    result = runner.invoke(app, ["process", "--document", first.id])

    assert result.exit_code == 0, result.output
    store = open_store()
    assert store.count(DocumentChunk, document_id=first.id) == first.chunk_count


def test_process_unknown_document(project: Path) -> None:
    runner.invoke(app, ["init"])

    result = runner.invoke(app, ["process", "--document", "nope"])

    assert result.exit_code == 1
    assert "Document not found" in result.output
