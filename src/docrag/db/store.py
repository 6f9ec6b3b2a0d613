"""DocumentStore: unit-of-work access to documents, chunks and associations.

Writes are staged on the open connection and only committed by save(), so a
caller can group an insert/update/delete sequence into one commit. Vec tables
are handled by docrag.db.vectors; this module never touches them.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from docrag.db.models import (
    ConversationDocument,
    Document,
    DocumentChunk,
    DocumentStatus,
)

T = TypeVar("T")


@dataclass(frozen=True)
class _Table:
    name: str
    # model attribute -> column name
    columns: dict[str, str]
    order_by: str
    from_row: Callable[[sqlite3.Row], Any]
    key: str | None = "id"


def _row_to_document(row: sqlite3.Row) -> Document:
    return Document(
        id=row["id"],
        name=row["name"],
        locator=row["locator"],
        kind=row["kind"],
        size_bytes=row["size_bytes"],
        status=DocumentStatus(row["status"]),
        created_at=row["created_at"],
        processed_at=row["processed_at"],
        chunk_count=row["chunk_count"],
    )


def _row_to_chunk(row: sqlite3.Row) -> DocumentChunk:
    return DocumentChunk(
        id=row["id"],
        document_id=row["document_id"],
        text=row["text"],
        index=row["chunk_index"],
    )


def _row_to_association(row: sqlite3.Row) -> ConversationDocument:
    return ConversationDocument(
        rowid=row["rowid"],
        conversation_id=row["conversation_id"],
        document_id=row["document_id"],
    )


_TABLES: dict[type, _Table] = {
    Document: _Table(
        name="documents",
        columns={
            "id": "id",
            "name": "name",
            "locator": "locator",
            "kind": "kind",
            "size_bytes": "size_bytes",
            "status": "status",
            "created_at": "created_at",
            "processed_at": "processed_at",
            "chunk_count": "chunk_count",
        },
        order_by="created_at, rowid",
        from_row=_row_to_document,
    ),
    DocumentChunk: _Table(
        name="document_chunks",
        columns={
            "id": "id",
            "document_id": "document_id",
            "text": "text",
            "index": "chunk_index",
        },
        order_by="document_id, chunk_index",
        from_row=_row_to_chunk,
    ),
    ConversationDocument: _Table(
        name="conversation_documents",
        columns={
            "conversation_id": "conversation_id",
            "document_id": "document_id",
        },
        order_by="rowid",
        from_row=_row_to_association,
        key=None,
    ),
}


class DocumentStore:
    """Data access layer for Document, DocumentChunk and ConversationDocument.

    Wraps an open sqlite3.Connection owned by the caller. The store assumes a
    single writer: no locking is performed.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with the schema initialised
                (see docrag.db.schema.initialize).
        """
        self._conn = conn

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def fetch(self, model: type[T], **criteria: Any) -> list[T]:
        """Return all *model* rows whose attributes equal *criteria*.

        Values may be a scalar (``=``) or a list/tuple/set (``IN``).

        Raises:
            KeyError: If *model* is not a stored entity or a criterion names an
                unknown attribute.
        """
        table = _table_for(model)
        clauses: list[str] = []
        params: list[Any] = []
        for attr, value in criteria.items():
            if attr not in table.columns:
                raise KeyError(f"{model.__name__} has no stored attribute '{attr}'")
            column = table.columns[attr]
            if isinstance(value, (list, tuple, set, frozenset)):
                values = [_to_db(v) for v in value]
                if not values:
                    return []
                clauses.append(f"{column} IN ({','.join('?' * len(values))})")
                params.extend(values)
            else:
                clauses.append(f"{column} = ?")
                params.append(_to_db(value))

        sql = f"SELECT rowid, * FROM {table.name}"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += f" ORDER BY {table.order_by}"
        return [table.from_row(r) for r in self._conn.execute(sql, params).fetchall()]

    def get(self, model: type[T], entity_id: str) -> T | None:
        """Return the *model* row with primary key *entity_id*, or None."""
        rows = self.fetch(model, id=entity_id)
        return rows[0] if rows else None

    def count(self, model: type, **criteria: Any) -> int:
        return len(self.fetch(model, **criteria))

    # ------------------------------------------------------------------
    # Staged writes
    # ------------------------------------------------------------------

    def insert(self, entity: Any) -> None:
        """Stage an INSERT for *entity*. Call save() to commit."""
        table = _table_for(type(entity))
        attrs = list(table.columns)
        cur = self._conn.execute(
            f"INSERT INTO {table.name} ({', '.join(table.columns.values())}) "
            f"VALUES ({', '.join('?' * len(attrs))})",
            [_to_db(getattr(entity, a)) for a in attrs],
        )
        if isinstance(entity, ConversationDocument):
            entity.rowid = cur.lastrowid

    def update(self, entity: Any) -> None:
        """Stage an UPDATE of every stored attribute of *entity* by primary key."""
        table = _table_for(type(entity))
        if table.key is None:
            raise TypeError(f"{type(entity).__name__} rows cannot be updated")
        attrs = [a for a in table.columns if a != table.key]
        assignments = ", ".join(f"{table.columns[a]} = ?" for a in attrs)
        self._conn.execute(
            f"UPDATE {table.name} SET {assignments} WHERE {table.key} = ?",
            [_to_db(getattr(entity, a)) for a in attrs] + [getattr(entity, table.key)],
        )

    def delete(self, entity: Any) -> None:
        """Stage a DELETE of exactly one row for *entity*."""
        table = _table_for(type(entity))
        if isinstance(entity, ConversationDocument):
            if entity.rowid is not None:
                self._conn.execute(
                    f"DELETE FROM {table.name} WHERE rowid = ?", (entity.rowid,)
                )
            else:
                self._conn.execute(
                    f"""
                    DELETE FROM {table.name} WHERE rowid = (
                        SELECT rowid FROM {table.name}
                        WHERE conversation_id = ? AND document_id = ?
                        ORDER BY rowid LIMIT 1
                    )
                    """,
                    (entity.conversation_id, entity.document_id),
                )
            return
        self._conn.execute(
            f"DELETE FROM {table.name} WHERE {table.key} = ?",
            (getattr(entity, table.key),),
        )

    def delete_where(self, model: type, **criteria: Any) -> int:
        """Stage a bulk DELETE of all *model* rows matching *criteria*.

        Returns the number of rows deleted.
        """
        table = _table_for(model)
        if not criteria:
            raise ValueError("delete_where() requires at least one criterion")
        for attr in criteria:
            if attr not in table.columns:
                raise KeyError(f"{model.__name__} has no stored attribute '{attr}'")
        where = " AND ".join(f"{table.columns[a]} = ?" for a in criteria)
        cur = self._conn.execute(
            f"DELETE FROM {table.name} WHERE {where}",
            [_to_db(v) for v in criteria.values()],
        )
        return cur.rowcount

    def save(self) -> None:
        """Commit staged writes. sqlite3.Error propagates on I/O failure."""
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _table_for(model: type) -> _Table:
    try:
        return _TABLES[model]
    except KeyError:
        raise KeyError(f"{model.__name__} is not a stored entity") from None


def _to_db(value: Any) -> Any:
    if isinstance(value, DocumentStatus):
        return value.value
    return value
