"""Conversation-scoped retriever: expand → multi-query search → re-rank → diversify.

Re-rank score for each candidate hit:
  adjusted = similarity
           + 0.3 * |query words ∩ hit words| / |query words|
           + 0.2 if the lowercase query occurs verbatim in the lowercase hit text

Query words are the lowercase whitespace tokens of the original query longer
than two characters; with no such words the overlap term is 0.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from docrag.db.models import (
    Conversation,
    Document,
    DocumentChunk,
    RetrievedChunk,
    SimilarityHit,
)
from docrag.db.store import DocumentStore
from docrag.rag.conversations import ConversationDocuments
from docrag.rag.expander import expand_query
from docrag.rag.protocols import EmbeddingProvider, SimilarityIndex

logger = logging.getLogger(__name__)

OVERFETCH_FACTOR = 3
TERM_OVERLAP_WEIGHT = 0.3
PHRASE_MATCH_BOOST = 0.2
SAME_DOCUMENT_THRESHOLD = 0.7
_MIN_QUERY_WORD_LENGTH = 3


class Retriever:
    """Retrieve the chunks most relevant to a query within one conversation.

    Args:
        store: DocumentStore used for conversation scope and entity resolution.
        embedder: Embeds each expanded query.
        index: Nearest-neighbour search over chunk vectors.
    """

    def __init__(
        self,
        store: DocumentStore,
        embedder: EmbeddingProvider,
        index: SimilarityIndex,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._index = index
        self._associations = ConversationDocuments(store)

    async def retrieve_context(
        self,
        query: str,
        conversation: Conversation,
        top_k: int = 5,
    ) -> list[RetrievedChunk]:
        """Return up to *top_k* chunks from the conversation's documents, best-first.

        Embedding and index errors propagate; no partial result is returned.

        Raises:
            ValueError: If *top_k* is less than 1.
        """
        if top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")

        scope = {
            cd.document_id
            for cd in self._associations.get_conversation_documents(conversation)
        }
        if not scope:
            logger.debug("No documents associated with conversation %s", conversation.id)
            return []
        logger.debug(
            "Found %d documents associated with conversation %s",
            len(scope),
            conversation.id,
        )

        candidates: list[SimilarityHit] = []
        for variant in expand_query(query):
            vector = await self._embedder.embed(variant)
            candidates.extend(await self._index.search(vector, top_k * OVERFETCH_FACTOR))

        in_scope = [hit for hit in dedupe_hits(candidates) if hit.document_id in scope]
        ranked = rerank(in_scope, query)
        selected = select_diverse(ranked, top_k)

        retrieved = self._resolve(selected)
        logger.debug("Retrieved %d chunks for query: '%s'", len(retrieved), query)
        return retrieved

    def _resolve(self, hits: list[SimilarityHit]) -> list[RetrievedChunk]:
        retrieved: list[RetrievedChunk] = []
        for hit in hits:
            chunk = self._store.get(DocumentChunk, hit.chunk_id)
            document = self._store.get(Document, hit.document_id)
            if chunk is None or document is None:
                logger.debug(
                    "Skipping chunk %s of document %s: no longer stored",
                    hit.chunk_id,
                    hit.document_id,
                )
                continue
            retrieved.append(RetrievedChunk(chunk=chunk, document=document, score=hit.score))
        return retrieved


# ------------------------------------------------------------------
# Ranking helpers
# ------------------------------------------------------------------


def dedupe_hits(hits: Iterable[SimilarityHit]) -> list[SimilarityHit]:
    """Drop repeated (chunk_id, document_id) hits, keeping the first seen."""
    seen: set[tuple[str, str]] = set()
    unique: list[SimilarityHit] = []
    for hit in hits:
        if hit.key not in seen:
            seen.add(hit.key)
            unique.append(hit)
    return unique


def query_words(query: str) -> set[str]:
    return {w for w in query.lower().split() if len(w) >= _MIN_QUERY_WORD_LENGTH}


def adjusted_score(similarity: float, text: str, query: str) -> float:
    words = query_words(query)
    score = similarity
    if words:
        overlap = words & set(text.lower().split())
        score += TERM_OVERLAP_WEIGHT * (len(overlap) / len(words))
    if query.lower() in text.lower():
        score += PHRASE_MATCH_BOOST
    return score


def rerank(hits: list[SimilarityHit], query: str) -> list[SimilarityHit]:
    """Return copies of *hits* rescored with adjusted_score(), best-first.

    The input hits are left untouched. The sort is stable: equal scores keep
    their incoming order.
    """
    rescored = [replace(hit, score=adjusted_score(hit.score, hit.text, query)) for hit in hits]
    return sorted(rescored, key=lambda h: h.score, reverse=True)


def select_diverse(ranked: list[SimilarityHit], max_results: int) -> list[SimilarityHit]:
    """Pick up to *max_results* hits from *ranked*, spreading across documents.

    The top hit is always taken. Further hits are taken when their document
    has not been used yet, or when their score exceeds SAME_DOCUMENT_THRESHOLD.
    Remaining slots are filled with the best hits not yet chosen.
    """
    if len(ranked) <= max_results:
        return list(ranked)

    selected = [ranked[0]]
    chosen = {ranked[0].key}
    used_documents = {ranked[0].document_id}

    for hit in ranked[1:]:
        if len(selected) >= max_results:
            break
        if hit.document_id not in used_documents:
            used_documents.add(hit.document_id)
        elif hit.score <= SAME_DOCUMENT_THRESHOLD:
            continue
        selected.append(hit)
        chosen.add(hit.key)

    for hit in ranked:
        if len(selected) >= max_results:
            break
        if hit.key not in chosen:
            selected.append(hit)
            chosen.add(hit.key)

    return selected
