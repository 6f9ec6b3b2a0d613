"""Conversation ↔ document associations that define retrieval scope."""

from __future__ import annotations

from docrag.db.models import Conversation, ConversationDocument, Document
from docrag.db.store import DocumentStore


class ConversationDocuments:
    """Add, remove and list the documents a conversation may retrieve from.

    Pairs are not unique: adding the same document twice stores two rows, and
    removing it once deletes only one of them.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def add_document_to_conversation(
        self, document: Document, conversation: Conversation
    ) -> ConversationDocument:
        association = ConversationDocument(
            conversation_id=conversation.id, document_id=document.id
        )
        self._store.insert(association)
        self._store.save()
        return association

    def remove_document_from_conversation(
        self, document: Document, conversation: Conversation
    ) -> bool:
        """Delete the first matching association. Returns False if none existed."""
        rows = self._store.fetch(
            ConversationDocument,
            conversation_id=conversation.id,
            document_id=document.id,
        )
        if not rows:
            return False
        self._store.delete(rows[0])
        self._store.save()
        return True

    def get_conversation_documents(
        self, conversation: Conversation
    ) -> list[ConversationDocument]:
        return self._store.fetch(ConversationDocument, conversation_id=conversation.id)
