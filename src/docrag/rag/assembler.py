"""Prompt augmentation: fold retrieved chunks into the next user turn."""

from __future__ import annotations

from docrag.db.models import RetrievedChunk

_PROMPT_TEMPLATE = """\
Based on the following documents:

{context}

User query: {message}

Please provide a helpful response based on the above documents when relevant."""


def format_chunk(retrieved: RetrievedChunk) -> str:
    return f"From document '{retrieved.document.name}':\n{retrieved.chunk.text}"


def augment_prompt(user_message: str, retrieved_chunks: list[RetrievedChunk]) -> str:
    """Return *user_message* wrapped with its retrieved context.

    With no retrieved chunks the message is returned unchanged.
    """
    if not retrieved_chunks:
        return user_message

    context = "\n\n".join(format_chunk(rc) for rc in retrieved_chunks)
    return _PROMPT_TEMPLATE.format(context=context, message=user_message)
