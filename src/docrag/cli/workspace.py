"""Shared CLI plumbing: config, database and service wiring."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from docrag.cli.errors import err_config, err_no_db
from docrag.config import ConfigError, DocragConfig, load_config
from docrag.db.connection import Database
from docrag.db.schema import initialize
from docrag.db.store import DocumentStore
from docrag.db.vectors import SqliteVecIndex
from docrag.ingest.embedder import EmbeddingConfig, LiteLLMEmbeddingProvider
from docrag.ingest.library import DocumentLibrary
from docrag.ingest.parser import DocumentParser
from docrag.ingest.pipeline import DocumentProcessingPipeline
from docrag.ingest.plaintext import PlainTextChunker
from docrag.rag.retriever import Retriever

console = Console()


@dataclass
class Workspace:
    cfg: DocragConfig
    conn: sqlite3.Connection
    store: DocumentStore
    index: SqliteVecIndex
    library: DocumentLibrary

    def embedder(self) -> LiteLLMEmbeddingProvider:
        return LiteLLMEmbeddingProvider(
            EmbeddingConfig(
                model=self.cfg.embedding.model,
                dimensions=self.cfg.embedding.dimensions,
            )
        )

    def pipeline(self) -> DocumentProcessingPipeline:
        return DocumentProcessingPipeline(
            store=self.store,
            parser=DocumentParser(),
            chunker=PlainTextChunker(
                chunk_size=self.cfg.chunking.chunk_size,
                overlap=self.cfg.chunking.overlap,
            ),
            embedder=self.embedder(),
            index=self.index,
        )

    def retriever(self) -> Retriever:
        return Retriever(store=self.store, embedder=self.embedder(), index=self.index)

    def close(self) -> None:
        self.conn.close()


def load_cfg() -> DocragConfig:
    try:
        return load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1) from exc


def resolve_db(db: Path | None, cfg: DocragConfig) -> Path:
    return db if db is not None else Path(cfg.store.path)


def open_workspace(db: Path | None, *, create: bool = False) -> Workspace:
    """Open the database and wire the services. Exits 1 if it is missing."""
    cfg = load_cfg()
    database = Database(resolve_db(db, cfg))
    if not create and not database.exists:
        console.print(err_no_db(str(database.db_path)))
        raise typer.Exit(1)

    conn = database.connect()
    initialize(conn)
    index = SqliteVecIndex.for_model(conn, cfg.embedding.model, cfg.embedding.dimensions)
    store = DocumentStore(conn)
    return Workspace(
        cfg=cfg,
        conn=conn,
        store=store,
        index=index,
        library=DocumentLibrary(store, index),
    )


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich when --verbose is given."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # LiteLLM and httpx are noisy at DEBUG.
    for name in ("LiteLLM", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
