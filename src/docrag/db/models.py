"""Domain models for the docrag database layer.

Cross-entity references are plain id fields resolved through DocumentStore
lookups; no model holds a pointer to another model.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> str:
    """Current UTC time as an ISO-8601 string (the stored timestamp format)."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class DocumentStatus(str, Enum):
    IMPORTED = "imported"
    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"


@dataclass
class Document:
    """A user-supplied document.

    ``chunk_count`` is only authoritative while ``status`` is PROCESSED: it is
    the number of chunks created by the processing run that succeeded.
    """

    name: str
    locator: str
    kind: str = "pdf"
    size_bytes: int = 0
    status: DocumentStatus = DocumentStatus.IMPORTED
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utcnow)
    processed_at: str | None = None
    chunk_count: int = 0


@dataclass(frozen=True)
class DocumentChunk:
    document_id: str
    text: str
    index: int
    id: str = field(default_factory=new_id)


@dataclass
class ConversationDocument:
    conversation_id: str
    document_id: str
    rowid: int | None = None  # set by the store; None for unsaved rows


@dataclass
class Conversation:
    id: str
    title: str = ""


@dataclass
class SimilarityHit:
    """A nearest-neighbour result. Re-ranking returns copies with adjusted scores."""

    chunk_id: str
    document_id: str
    text: str
    score: float

    @property
    def key(self) -> tuple[str, str]:
        return (self.chunk_id, self.document_id)


@dataclass
class RetrievedChunk:
    chunk: DocumentChunk
    document: Document
    score: float
