"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from docqa.rag.embedder import Embedder
from docqa.store.blob import InMemoryBlobStore, SqliteBlobStore
from docqa.store.documents import DocumentStore
from docqa.store.models import Chunk, Document

_ENV_VARS = (
    "DOCQA_GENERATION_MODEL",
    "DOCQA_EMBEDDING_MODEL",
    "DOCQA_STORE",
    "DOCQA_OWNER",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """No real keys, no user config: every test starts from defaults."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("docqa.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global" / "config.yaml")
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def sqlite_blob(tmp_path):
    """File-based blob store in tmp_path, closed after test."""
    blob = SqliteBlobStore(tmp_path / "docqa.db")
    yield blob
    blob.close()


@pytest.fixture
def memory_blob():
    return InMemoryBlobStore()


@pytest.fixture
def store(memory_blob):
    return DocumentStore(memory_blob)


class StubEmbedder(Embedder):
    """Embedder with canned vectors; ``query_vector=None`` simulates provider failure."""

    def __init__(self, query_vector=None, available=True, model="openai/text-embedding-3-small"):
        super().__init__(model)
        self.query_vector = query_vector
        self._available = available
        self.queries: list[str] = []

    def available(self) -> bool:
        return self._available

    def embed_query(self, text):
        self.queries.append(text)
        return self.query_vector

    def embed_batch(self, texts):
        if not self._available or not texts:
            return None
        return [[float(len(t)), 1.0] for t in texts]


@pytest.fixture
def stub_embedder():
    return StubEmbedder


def _make_document(
    doc_id: str,
    filename: str,
    texts: list[str],
    embeddings: list[list[float] | None] | None = None,
    owner: str | None = None,
    embedding_model: str | None = None,
) -> Document:
    embeddings = embeddings or [None] * len(texts)
    chunks = [Chunk(text=t, index=i, embedding=e) for i, (t, e) in enumerate(zip(texts, embeddings))]
    return Document(
        id=doc_id,
        filename=filename,
        chunks=chunks,
        full_text=" ".join(texts),
        uploaded_at=1_700_000_000_000,
        owner_id=owner,
        embedding_model=embedding_model,
    )


@pytest.fixture
def make_document():
    return _make_document
