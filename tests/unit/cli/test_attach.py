"""Tests for docrag attach / detach."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from docrag.cli.main import app
from docrag.db.models import ConversationDocument

runner = CliRunner()


def test_attach_processed_document(project: Path, write_file, open_store, mock_embedding) -> None:
    runner.invoke(app, ["add", str(write_file("notes.txt"))])

    result = runner.invoke(app, ["attach", "notes.txt", "conv-1"])

    assert result.exit_code == 0, result.output
    assert "Attached notes.txt" in result.output
    assert "will not be" not in result.output
    links = open_store().fetch(ConversationDocument, conversation_id="conv-1")
    assert len(links) == 1


def test_attach_unprocessed_document_warns(project: Path, write_file) -> None:
    runner.invoke(app, ["add", str(write_file("notes.txt")), "--no-process"])

    result = runner.invoke(app, ["attach", "notes.txt", "conv-1"])

    assert result.exit_code == 0
    assert "imported" in result.output
    assert "docrag process" in result.output


def test_attach_unknown_document(project: Path) -> None:
    runner.invoke(app, ["init"])

    result = runner.invoke(app, ["attach", "nope.pdf", "conv-1"])

    assert result.exit_code == 1
    assert "Document not found" in result.output


def test_attach_no_db_exits_1(project: Path) -> None:
    result = runner.invoke(app, ["attach", "a.txt", "conv-1"])

    assert result.exit_code == 1
    assert "No database" in result.output


def test_detach(project: Path, write_file, open_store) -> None:
    runner.invoke(app, ["add", str(write_file("notes.txt")), "--no-process"])
    runner.invoke(app, ["attach", "notes.txt", "conv-1"])

    result = runner.invoke(app, ["detach", "notes.txt", "conv-1"])

    assert result.exit_code == 0
    assert "Detached notes.txt" in result.output
    assert open_store().fetch(ConversationDocument) == []


def test_detach_not_attached(project: Path, write_file) -> None:
    runner.invoke(app, ["add", str(write_file("notes.txt")), "--no-process"])

    result = runner.invoke(app, ["detach", "notes.txt", "conv-1"])

    assert result.exit_code == 0
    assert "was not attached" in result.output
