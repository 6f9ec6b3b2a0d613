"""docrag ask — retrieve conversation-scoped context for a query.

Prints the ranked chunks and, with --prompt, the augmented prompt that would
be sent to the LLM as the user turn.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from docrag.cli.errors import err_no_api_key, err_retrieval_failed, warn_no_conversation_documents
from docrag.cli.workspace import configure_logging, console, open_workspace
from docrag.db.models import Conversation
from docrag.rag.assembler import augment_prompt
from docrag.rag.conversations import ConversationDocuments
from docrag.rag.llm_client import provider_of, validate_api_key


def ask_cmd(
    conversation: Annotated[str, typer.Argument(help="Conversation id.")],
    query: Annotated[str, typer.Argument(help="User message to retrieve context for.")],
    top_k: Annotated[
        int | None,
        typer.Option("--top-k", "-k", min=1, help="Chunks to return (default: retrieval.top_k)."),
    ] = None,
    prompt: Annotated[
        bool,
        typer.Option("--prompt", help="Print the augmented prompt."),
    ] = False,
    db: Annotated[Path | None, typer.Option("--db", help="Path to the database.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging.")] = False,
) -> None:
    """Retrieve the most relevant chunks for QUERY within CONVERSATION."""
    configure_logging(verbose)
    ws = open_workspace(db)
    try:
        conv = Conversation(id=conversation)
        if not ConversationDocuments(ws.store).get_conversation_documents(conv):
            console.print(warn_no_conversation_documents(conversation))
            if prompt:
                console.print(query, markup=False)
            return

        try:
            validate_api_key(ws.cfg.embedding.model)
        except EnvironmentError as exc:
            console.print(err_no_api_key(provider_of(ws.cfg.embedding.model)))
            raise typer.Exit(1) from exc

        k = top_k if top_k is not None else ws.cfg.retrieval.top_k
        try:
            chunks = asyncio.run(ws.retriever().retrieve_context(query, conv, top_k=k))
        except Exception as exc:
            console.print(err_retrieval_failed(str(exc)))
            raise typer.Exit(1) from exc

        if not chunks:
            console.print("[yellow]No relevant chunks found.[/]")
        else:
            table = Table(title=f"Top {len(chunks)} chunks", show_lines=True)
            table.add_column("#", justify="right")
            table.add_column("Score", justify="right")
            table.add_column("Document")
            table.add_column("Chunk", justify="right")
            table.add_column("Text")
            for i, rc in enumerate(chunks, start=1):
                snippet = rc.chunk.text if len(rc.chunk.text) <= 200 else rc.chunk.text[:200] + "…"
                table.add_row(
                    str(i), f"{rc.score:.3f}", escape(rc.document.name), str(rc.chunk.index), escape(snippet)
                )
            console.print(table)

        if prompt:
            console.rule("Augmented prompt")
            console.print(augment_prompt(query, chunks), markup=False, highlight=False)
    finally:
        ws.close()
