"""Retrieval: query expansion, ranking, scope and prompt augmentation."""

from docrag.rag.assembler import augment_prompt
from docrag.rag.conversations import ConversationDocuments
from docrag.rag.expander import expand_query
from docrag.rag.retriever import Retriever

__all__ = ["ConversationDocuments", "Retriever", "augment_prompt", "expand_query"]
