"""docrag add / docrag process — register documents and run the processing pipeline.

  docrag add report.pdf notes.md          register + process each file
  docrag add report.pdf --no-process      register only
  docrag process                          process every imported document
  docrag process --retry-failed           reset failed documents and process them too
  docrag process --keep-going             continue past a failing document
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.progress import Progress, SpinnerColumn, TextColumn

from docrag.cli.errors import (
    err_document_not_found,
    err_no_api_key,
    err_processing_failed,
    err_unsupported_file,
)
from docrag.cli.workspace import Workspace, configure_logging, console, open_workspace
from docrag.db.models import Document, DocumentStatus
from docrag.ingest.library import SUPPORTED_KINDS, DocumentImportError
from docrag.ingest.pipeline import DocumentProcessingPipeline
from docrag.rag.llm_client import provider_of, validate_api_key


def add_cmd(
    paths: Annotated[
        list[Path],
        typer.Argument(help="Document files to add (pdf, txt, md, docx, rtf)."),
    ],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the database (created if missing)."),
    ] = None,
    process: Annotated[
        bool,
        typer.Option("--process/--no-process", help="Chunk and embed after registering."),
    ] = True,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging.")] = False,
) -> None:
    """Add documents to the library and (by default) process them."""
    configure_logging(verbose)
    ws = open_workspace(db, create=True)
    try:
        added: list[Document] = []
        for path in paths:
            try:
                document = ws.library.register_document(path)
            except DocumentImportError as exc:
                if path.suffix.lower() not in SUPPORTED_KINDS:
                    console.print(err_unsupported_file(str(path), sorted(SUPPORTED_KINDS)))
                else:
                    console.print(f"[red]✗[/] {exc}")
                continue
            console.print(f"[green]✓[/] Added {document.name} [dim]({document.id})[/]")
            added.append(document)

        if not added:
            raise typer.Exit(1)
        if process:
            _require_api_key(ws)
            failures = _process_each(ws.pipeline(), added)
            if failures:
                raise typer.Exit(1)
    finally:
        ws.close()


def process_cmd(
    document: Annotated[
        str | None,
        typer.Option("--document", "-d", help="Document id or name (default: all pending)."),
    ] = None,
    db: Annotated[Path | None, typer.Option("--db", help="Path to the database.")] = None,
    retry_failed: Annotated[
        bool,
        typer.Option("--retry-failed", help="Also reset and reprocess failed documents."),
    ] = False,
    keep_going: Annotated[
        bool,
        typer.Option("--keep-going", help="Continue with the next document after a failure."),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging.")] = False,
) -> None:
    """Process pending documents: parse, chunk, embed and index."""
    configure_logging(verbose)
    ws = open_workspace(db)
    try:
        pending = _select_pending(ws, document, retry_failed)
        if not pending:
            console.print("[dim]Nothing to process.[/]")
            return

        _require_api_key(ws)
        pipeline = ws.pipeline()
        if keep_going:
            if _process_each(pipeline, pending):
                raise typer.Exit(1)
            return

        try:
            asyncio.run(pipeline.process_documents(pending))
        except Exception as exc:
            failed = next((d for d in pending if d.status is DocumentStatus.FAILED), None)
            name = failed.name if failed is not None else "document"
            console.print(err_processing_failed(name, str(exc)))
            raise typer.Exit(1) from exc
        for doc in pending:
            console.print(f"[green]✓[/] {doc.name}: {doc.chunk_count} chunks")
    finally:
        ws.close()


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _select_pending(ws: Workspace, ref: str | None, retry_failed: bool) -> list[Document]:
    if ref is not None:
        found = ws.library.find_document(ref)
        if found is None:
            console.print(err_document_not_found(ref))
            raise typer.Exit(1)
        if found.status is not DocumentStatus.IMPORTED:
            ws.library.reset_document(found)
        return [found]

    pending = ws.library.list_documents(DocumentStatus.IMPORTED)
    if retry_failed:
        for failed in ws.library.list_documents(DocumentStatus.FAILED):
            ws.library.reset_document(failed)
            pending.append(failed)
    return pending


def _process_each(pipeline: DocumentProcessingPipeline, documents: list[Document]) -> int:
    """Process documents one by one, reporting each outcome. Returns the failure count."""
    failures = 0
    for doc in documents:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=console,
        ) as prog:
            prog.add_task(f"Processing {doc.name}…", total=None)
            try:
                asyncio.run(pipeline.process_document(doc))
            except Exception as exc:
                failures += 1
                console.print(err_processing_failed(doc.name, str(exc)))
                continue
        console.print(f"  [green]✓[/] {doc.name}: {doc.chunk_count} chunks indexed")
    return failures


def _require_api_key(ws: Workspace) -> None:
    try:
        validate_api_key(ws.cfg.embedding.model)
    except EnvironmentError as exc:
        console.print(err_no_api_key(provider_of(ws.cfg.embedding.model)))
        raise typer.Exit(1) from exc
