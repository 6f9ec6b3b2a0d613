"""docrag database layer."""

from docrag.db.connection import Database
from docrag.db.migrations import MIGRATIONS, run_migrations
from docrag.db.schema import initialize
from docrag.db.store import DocumentStore
from docrag.db.vectors import SqliteVecIndex, ensure_vec_table, model_to_slug, vec_table_name

__all__ = [
    "Database",
    "DocumentStore",
    "SqliteVecIndex",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
    "ensure_vec_table",
    "model_to_slug",
    "vec_table_name",
]
