"""docrag init — create the database, a project docrag.yaml and the global config."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from docrag.cli.workspace import console, open_workspace, resolve_db
from docrag.config import ensure_global_config

_PROJECT_CONFIG = Path("docrag.yaml")

_PROJECT_TEMPLATE = """\
# docrag project configuration
embedding:
  model: {model}
  dimensions: {dimensions}

retrieval:
  top_k: {top_k}

chunking:
  chunk_size: {chunk_size}
  overlap: {overlap}
"""


def init_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the database (default: store.path from config)."),
    ] = None,
) -> None:
    """Create the docrag database, a default docrag.yaml and ~/.docrag/config.yaml."""
    ws = open_workspace(db, create=True)
    try:
        cfg = ws.cfg
        console.print(f"[green]✓[/] Database ready: {resolve_db(db, cfg)}")
        console.print(f"  Vector index: {ws.index.table} ({cfg.embedding.dimensions} dims)")

        if _PROJECT_CONFIG.exists():
            console.print(f"  [dim]{_PROJECT_CONFIG} already exists — left unchanged[/]")
        else:
            _PROJECT_CONFIG.write_text(
                _PROJECT_TEMPLATE.format(
                    model=cfg.embedding.model,
                    dimensions=cfg.embedding.dimensions,
                    top_k=cfg.retrieval.top_k,
                    chunk_size=cfg.chunking.chunk_size,
                    overlap=cfg.chunking.overlap,
                ),
                encoding="utf-8",
            )
            console.print(f"[green]✓[/] Wrote {_PROJECT_CONFIG}")

        cfg_path = ensure_global_config()
        console.print(f"[green]✓[/] {cfg_path} (global config)")
    finally:
        ws.close()
