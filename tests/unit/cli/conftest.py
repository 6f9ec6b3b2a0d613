"""Shared fixtures for CLI tests: an isolated project dir and a mocked embedding backend."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from docrag.db.connection import Database
from docrag.db.store import DocumentStore

_PROJECT_YAML = """\
embedding:
  model: openai/text-embedding-3-small
  dimensions: 3
"""


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """CWD = tmp_path with a 3-dim docrag.yaml; global config redirected under tmp_path; fake API key."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "docrag.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global" / "config.yaml"
    )
    monkeypatch.delenv("DOCRAG_EMBEDDING_MODEL", raising=False)
    monkeypatch.delenv("DOCRAG_DB", raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    (tmp_path / "docrag.yaml").write_text(_PROJECT_YAML, encoding="utf-8")
    return tmp_path


def _respond(*, model: str, input: list[str], num_retries: int) -> MagicMock:
    response = MagicMock()
    response.data = [{"embedding": [float(len(t)), 0.5, 0.5]} for t in input]
    return response


@pytest.fixture
def embedding_response():
    """The fake backend response function, for restoring a patched side_effect."""
    return _respond


@pytest.fixture
def mock_embedding():
    """Patch litellm.aembedding with a deterministic 3-dim fake."""
    mock = AsyncMock(side_effect=_respond)
    with patch("docrag.rag.llm_client.litellm.aembedding", mock):
        yield mock


@pytest.fixture
def open_store(project: Path):
    """Open the project database after a CLI run; closed at teardown."""
    conns = []

    def _open() -> DocumentStore:
        conn = Database(project / ".docrag.db").connect()
        conns.append(conn)
        return DocumentStore(conn)

    yield _open
    for conn in conns:
        conn.close()


@pytest.fixture
def write_file(project: Path):
    def _write(name: str, text: str = "Some document text.") -> Path:
        path = project / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
