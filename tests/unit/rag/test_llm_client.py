"""Tests for llm_client: API key validation and embedding calls."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from docrag.rag.llm_client import aembed, provider_of, validate_api_key


@pytest.mark.parametrize(
    "model,provider",
    [
        ("openai/text-embedding-3-small", "openai"),
        ("Ollama/nomic-embed-text", "ollama"),
        ("text-embedding-3-small", "openai"),
    ],
)
def test_provider_of(model, provider):
    assert provider_of(model) == provider


def test_validate_missing_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(EnvironmentError, match="OPENAI_API_KEY"):
        validate_api_key("openai/text-embedding-3-small")


def test_validate_present_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    validate_api_key("openai/text-embedding-3-small")


def test_validate_local_provider_needs_no_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    validate_api_key("ollama/nomic-embed-text")


def test_validate_unknown_provider_passes():
    validate_api_key("someprovider/model")


@pytest.mark.asyncio
async def test_aembed_returns_vectors_in_order():
    response = MagicMock()
    response.data = [{"embedding": [1.0, 0.0]}, {"embedding": [0.0, 1.0]}]
    mock = AsyncMock(return_value=response)

    with patch("docrag.rag.llm_client.litellm.aembedding", mock):
        vectors = await aembed("openai/m", ["a", "b"], num_retries=5)

    assert vectors == [[1.0, 0.0], [0.0, 1.0]]
    mock.assert_awaited_once_with(model="openai/m", input=["a", "b"], num_retries=5)
