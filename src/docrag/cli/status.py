"""docrag status — list documents, their processing state and conversation scope."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from docrag.cli.errors import warn_no_conversation_documents
from docrag.cli.workspace import console, open_workspace
from docrag.db.models import Conversation, Document, DocumentStatus
from docrag.ingest.pipeline import DocumentProcessingPipeline
from docrag.rag.conversations import ConversationDocuments

_STATUS_STYLE = {
    DocumentStatus.IMPORTED: "dim",
    DocumentStatus.PROCESSING: "yellow",
    DocumentStatus.PROCESSED: "green",
    DocumentStatus.FAILED: "red",
}


def status_cmd(
    conversation: Annotated[
        str | None,
        typer.Option("--conversation", "-c", help="Only documents attached to this conversation."),
    ] = None,
    db: Annotated[Path | None, typer.Option("--db", help="Path to the database.")] = None,
) -> None:
    """Show the document library and processing status."""
    ws = open_workspace(db)
    try:
        documents = ws.library.list_documents()
        title = "Documents"
        if conversation is not None:
            links = ConversationDocuments(ws.store).get_conversation_documents(
                Conversation(id=conversation)
            )
            if not links:
                console.print(warn_no_conversation_documents(conversation))
                return
            attached = {link.document_id for link in links}
            documents = [d for d in documents if d.id in attached]
            title = f"Documents in conversation {conversation}"

        if not documents:
            console.print("[yellow]No documents yet.[/]\n  Run:  docrag add <file>")
            return

        console.print(_documents_table(documents, title))
        total_chunks = sum(
            d.chunk_count for d in documents if d.status is DocumentStatus.PROCESSED
        )
        console.print(
            f"Documents: [bold]{len(documents)}[/]  |  "
            f"Indexed chunks: [bold]{total_chunks:,}[/]  |  "
            f"Vectors: [bold]{ws.index.count():,}[/] ({ws.cfg.embedding.model})"
        )
    finally:
        ws.close()


def _documents_table(documents: list[Document], title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Size", justify="right")
    table.add_column("Status")
    table.add_column("Chunks", justify="right")
    for doc in documents:
        state = DocumentProcessingPipeline.processing_status(doc)
        style = _STATUS_STYLE[doc.status]
        table.add_row(
            doc.id[:8],
            escape(doc.name),
            doc.kind,
            _format_bytes(doc.size_bytes),
            f"[{style}]{state.progress_text}[/]",
            str(doc.chunk_count) if state.is_complete else "—",
        )
    return table


def _format_bytes(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"
