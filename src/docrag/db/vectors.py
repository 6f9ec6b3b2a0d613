"""Per-model sqlite-vec virtual tables and the SimilarityIndex built on them.

Each embedding model gets its own ``vec_chunks_<slug>`` vec0 table (cosine
distance). The vec0 rowid is the rowid of a ``vector_entries`` row that
carries the chunk id, document id and chunk text for that vector.
"""

from __future__ import annotations

import json
import re
import sqlite3

from docrag.db.models import DocumentChunk, SimilarityHit

# Upper bound sqlite-vec places on a KNN query's k.
MAX_KNN_K = 4096


def model_to_slug(model: str) -> str:
    """Convert a provider/model string to a valid table name suffix.

    Examples:
        "openai/text-embedding-3-small" -> "openai_text_embedding_3_small"
        "ollama/nomic-embed-text" -> "ollama_nomic_embed_text"
    """
    return re.sub(r"[^a-z0-9]", "_", model.lower())


def vec_table_name(model_slug: str) -> str:
    """Return the full vec table name for a model slug."""
    return f"vec_chunks_{model_slug}"


def ensure_vec_table(conn: sqlite3.Connection, model_slug: str, dimensions: int) -> str:
    """Create vec_chunks_{model_slug} virtual table if it doesn't already exist.

    Args:
        conn: Active database connection (sqlite-vec must be loaded).
        model_slug: Sanitized model identifier (use model_to_slug() to generate).
        dimensions: Embedding vector dimensions (e.g. 1536 for text-embedding-3-small).

    Returns:
        The table name (vec_chunks_{model_slug}).
    """
    if not re.fullmatch(r"[a-z0-9_]+", model_slug):
        raise ValueError(
            f"Invalid model_slug '{model_slug}'; use model_to_slug() to sanitize."
        )
    if dimensions < 1:
        raise ValueError(f"dimensions must be >= 1, got {dimensions}")

    table = vec_table_name(model_slug)
    if not vec_table_exists(conn, table):
        conn.execute(
            f"CREATE VIRTUAL TABLE {table} USING vec0("
            f"embedding float[{dimensions}] distance_metric=cosine)"
        )
        conn.commit()

    return table


def vec_table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,)
    ).fetchone()
    return row is not None


class SqliteVecIndex:
    """SimilarityIndex over one sqlite-vec table.

    Scores are cosine similarities (``1 - cosine distance``), best first.
    Each store() commits immediately, so vectors written before a failure
    survive it.
    """

    def __init__(self, conn: sqlite3.Connection, table: str) -> None:
        if not re.fullmatch(r"vec_chunks_[a-z0-9_]+", table):
            raise ValueError(f"Invalid vec table name '{table}'")
        self._conn = conn
        self.table = table

    @classmethod
    def for_model(
        cls, conn: sqlite3.Connection, model: str, dimensions: int
    ) -> SqliteVecIndex:
        """Return an index for *model*, creating its vec table if needed."""
        return cls(conn, ensure_vec_table(conn, model_to_slug(model), dimensions))

    async def store(self, chunk: DocumentChunk, vector: list[float]) -> None:
        cur = self._conn.execute(
            """
            INSERT INTO vector_entries (vec_table, chunk_id, document_id, text)
            VALUES (?, ?, ?, ?)
            """,
            (self.table, chunk.id, chunk.document_id, chunk.text),
        )
        self._conn.execute(
            f"INSERT INTO {self.table}(rowid, embedding) VALUES (?, ?)",
            (cur.lastrowid, json.dumps(vector)),
        )
        self._conn.commit()

    async def search(self, vector: list[float], top_n: int) -> list[SimilarityHit]:
        """Return up to *top_n* nearest chunks, highest similarity first.

        *top_n* is capped at MAX_KNN_K. Equal distances are ordered by
        insertion order so repeated searches over an unchanged index return
        identical lists.
        """
        if top_n < 1:
            return []
        # vec0 allows only ORDER BY distance; rowid tie-break is applied in Python.
        rows = self._conn.execute(
            f"""
            WITH knn AS (
                SELECT rowid, distance FROM {self.table}
                WHERE embedding MATCH ? AND k = ?
            )
            SELECT knn.rowid AS rowid, knn.distance AS distance,
                   e.chunk_id AS chunk_id, e.document_id AS document_id, e.text AS text
            FROM knn
            JOIN vector_entries AS e ON e.rowid = knn.rowid
            ORDER BY knn.distance
            """,
            (json.dumps(vector), min(top_n, MAX_KNN_K)),
        ).fetchall()
        rows.sort(key=lambda r: (r["distance"], r["rowid"]))
        return [
            SimilarityHit(
                chunk_id=r["chunk_id"],
                document_id=r["document_id"],
                text=r["text"],
                score=1.0 - float(r["distance"]),
            )
            for r in rows
        ]

    def delete_document(self, document_id: str) -> int:
        """Delete every vector of *document_id* from this index. Returns the count."""
        rowids = [
            r[0]
            for r in self._conn.execute(
                "SELECT rowid FROM vector_entries WHERE vec_table = ? AND document_id = ?",
                (self.table, document_id),
            ).fetchall()
        ]
        if not rowids:
            return 0
        placeholders = ",".join("?" * len(rowids))
        self._conn.execute(
            f"DELETE FROM {self.table} WHERE rowid IN ({placeholders})", rowids
        )
        self._conn.execute(
            f"DELETE FROM vector_entries WHERE rowid IN ({placeholders})", rowids
        )
        self._conn.commit()
        return len(rowids)

    def count(self, document_id: str | None = None) -> int:
        sql = "SELECT COUNT(*) FROM vector_entries WHERE vec_table = ?"
        params: list[str] = [self.table]
        if document_id is not None:
            sql += " AND document_id = ?"
            params.append(document_id)
        return self._conn.execute(sql, params).fetchone()[0]
