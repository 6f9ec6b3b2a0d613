"""docrag remove — delete a document and everything derived from it.

Removes, in order: vectors, chunks, conversation associations, the document.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from docrag.cli.errors import err_document_not_found
from docrag.cli.workspace import console, open_workspace
from docrag.db.models import ConversationDocument


def remove_cmd(
    document: Annotated[str, typer.Argument(help="Document id or name.")],
    db: Annotated[Path | None, typer.Option("--db", help="Path to the database.")] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove a document and its chunks, vectors and conversation links."""
    ws = open_workspace(db)
    try:
        doc = ws.library.find_document(document)
        if doc is None:
            console.print(err_document_not_found(document))
            raise typer.Exit(0)

        vectors = ws.index.count(doc.id)
        links = ws.store.count(ConversationDocument, document_id=doc.id)
        console.print(f"\nRemove document: [bold]{doc.name}[/] [dim]({doc.id})[/]")
        console.print(f"  Vectors: {vectors}  |  Conversation links: {links}")

        if not yes:
            if not typer.confirm("Confirm removal?", default=False):
                console.print("[dim]Cancelled.[/]")
                raise typer.Exit(0)

        removed = ws.library.delete_document(doc)
        console.print(f"\n[green]✓[/] Removed: {doc.name}")
        console.print(f"  {removed} chunks, {vectors} vectors, {links} links deleted")
    finally:
        ws.close()
