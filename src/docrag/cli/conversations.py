"""docrag attach / detach — manage which documents a conversation can retrieve from."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from docrag.cli.errors import err_document_not_found
from docrag.cli.workspace import Workspace, console, open_workspace
from docrag.db.models import Conversation, Document, DocumentStatus
from docrag.rag.conversations import ConversationDocuments


def attach_cmd(
    document: Annotated[str, typer.Argument(help="Document id or name.")],
    conversation: Annotated[str, typer.Argument(help="Conversation id.")],
    db: Annotated[Path | None, typer.Option("--db", help="Path to the database.")] = None,
) -> None:
    """Make a document retrievable within a conversation."""
    ws = open_workspace(db)
    try:
        doc = _find(ws, document)
        ConversationDocuments(ws.store).add_document_to_conversation(
            doc, Conversation(id=conversation)
        )
        console.print(f"[green]✓[/] Attached {doc.name} to conversation {conversation}")
        if doc.status is not DocumentStatus.PROCESSED:
            console.print(
                f"  [yellow]⚠[/] {doc.name} is {doc.status.value}; it will not be "
                "retrieved until processing succeeds.\n"
                "  Run:  docrag process"
            )
    finally:
        ws.close()


def detach_cmd(
    document: Annotated[str, typer.Argument(help="Document id or name.")],
    conversation: Annotated[str, typer.Argument(help="Conversation id.")],
    db: Annotated[Path | None, typer.Option("--db", help="Path to the database.")] = None,
) -> None:
    """Stop retrieving a document within a conversation."""
    ws = open_workspace(db)
    try:
        doc = _find(ws, document)
        removed = ConversationDocuments(ws.store).remove_document_from_conversation(
            doc, Conversation(id=conversation)
        )
        if removed:
            console.print(f"[green]✓[/] Detached {doc.name} from conversation {conversation}")
        else:
            console.print(f"[dim]{doc.name} was not attached to conversation {conversation}.[/]")
    finally:
        ws.close()


def _find(ws: Workspace, ref: str) -> Document:
    doc = ws.library.find_document(ref)
    if doc is None:
        console.print(err_document_not_found(ref))
        raise typer.Exit(1)
    return doc
