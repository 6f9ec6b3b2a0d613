"""LiteLLM-backed EmbeddingProvider."""

from __future__ import annotations

from dataclasses import dataclass

from docrag.rag import llm_client


class EmbeddingError(RuntimeError):
    """Raised when the embedding backend returns an unusable response."""


@dataclass
class EmbeddingConfig:
    """Configuration for embedding generation."""

    model: str = "openai/text-embedding-3-small"
    dimensions: int = 1536
    num_retries: int = 3


class LiteLLMEmbeddingProvider:
    """Embed text through ``litellm.aembedding()``.

    Every returned vector is checked against ``config.dimensions`` so a model
    swap cannot silently write mismatched vectors into the index.

    Args:
        config: Embedding configuration (model, dimensions, retries).
    """

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self.config = config or EmbeddingConfig()

    async def embed(self, text: str) -> list[float]:
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        vectors = await llm_client.aembed(
            self.config.model, texts, num_retries=self.config.num_retries
        )
        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"Embedding model '{self.config.model}' returned {len(vectors)} "
                f"vectors for {len(texts)} inputs"
            )
        for vector in vectors:
            if len(vector) != self.config.dimensions:
                raise EmbeddingError(
                    f"Embedding model '{self.config.model}' returned a "
                    f"{len(vector)}-dimensional vector; expected {self.config.dimensions}"
                )
        return vectors
