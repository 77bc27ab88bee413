"""Context assembler: bounded context block for the chat system prompt.

Pipeline:
  1. Resolve document ids through the DocumentStore; unknown ids are skipped.
  2. No documents → "" (the caller drops the context section of the prompt).
  3. Semantic mode when a query is given, some chunk carries an embedding,
     and the embedder is available; otherwise flat concatenation.
  4. Semantic: embed the query, score every comparable chunk by cosine
     similarity, keep the top_k best (stable sort), pack ``[filename]`` blocks.
     A failed query embedding falls back to flat concatenation.
  5. Flat: every chunk of every document under a ``--- Document: name ---``
     header, in the order the ids were given.
  6. Both modes hard-truncate to max_chars and append a truncation marker.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from docqa.rag.embedder import Embedder
from docqa.rag.similarity import cosine_similarity
from docqa.store.documents import DocumentStore
from docqa.store.models import Chunk, Document

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 6_000
DEFAULT_TOP_K = 12

SEPARATOR = "\n\n"
SEMANTIC_TRUNCATION_MARKER = "\n\n[... truncated ...]"
FLAT_TRUNCATION_MARKER = "\n\n[... truncated for context length ...]"


@dataclass
class ScoredChunk:
    """A chunk with its cosine similarity to the query and its parent document."""

    document: Document
    chunk: Chunk
    score: float


def build_context(
    document_ids: list[str],
    store: DocumentStore,
    embedder: Embedder | None = None,
    max_chars: int = DEFAULT_MAX_CHARS,
    query: str | None = None,
    owner: str | None = None,
    top_k: int = DEFAULT_TOP_K,
) -> str:
    """Return the context block for *document_ids*, at most max_chars plus a marker.

    Args:
        document_ids: Documents selected for this chat turn, in display order.
        store: Process-wide document store.
        embedder: Embedding capability; None behaves like an unavailable one.
        max_chars: Character budget for the assembled block.
        query: Latest user question; blank or None forces flat mode.
        owner: Owner scope used to resolve the ids.
        top_k: Number of best-scoring chunks considered in semantic mode.
    """
    documents = store.get_many(document_ids, owner)
    if not documents:
        return ""

    query = (query or "").strip()
    if query and embedder is not None and _has_embeddings(documents) and embedder.available():
        semantic = _semantic_context(documents, query, embedder, max_chars, top_k)
        if semantic is not None:
            return semantic
    return flat_context(documents, max_chars)


# ------------------------------------------------------------------
# Semantic mode
# ------------------------------------------------------------------


def _has_embeddings(documents: list[Document]) -> bool:
    return any(d.is_embedded for d in documents)


def _semantic_context(
    documents: list[Document],
    query: str,
    embedder: Embedder,
    max_chars: int,
    top_k: int,
) -> str | None:
    """Ranked context, or None when the caller should fall back to flat mode."""
    query_vector = embedder.embed_query(query)
    if query_vector is None:
        logger.info("Query embedding unavailable; using flat context")
        return None

    comparable = [d for d in documents if d.embedding_model in (None, embedder.model)]
    scored = rank_chunks(query_vector, comparable, top_k)
    if not scored:
        logger.info("No chunks embedded with %s; using flat context", embedder.model)
        return None

    parts: list[str] = []
    total = 0
    for sc in scored:
        if total >= max_chars:
            break
        block = f"[{sc.document.filename}]\n{sc.chunk.text}"
        parts.append(block)
        total += len(block)
    return _truncate(SEPARATOR.join(parts), max_chars, SEMANTIC_TRUNCATION_MARKER)


def rank_chunks(
    query_vector: list[float],
    documents: list[Document],
    top_k: int = DEFAULT_TOP_K,
) -> list[ScoredChunk]:
    """Score every embedded chunk against *query_vector*; best first, ties in document order.

    Chunks whose vector length differs from the query are skipped.
    """
    scored: list[ScoredChunk] = []
    for document in documents:
        for chunk in document.chunks:
            if not chunk.embedding or len(chunk.embedding) != len(query_vector):
                continue
            scored.append(
                ScoredChunk(
                    document=document,
                    chunk=chunk,
                    score=cosine_similarity(query_vector, chunk.embedding),
                )
            )
    # list.sort is stable, so equal scores keep their original relative order.
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored[:top_k]


# ------------------------------------------------------------------
# Flat mode
# ------------------------------------------------------------------


def flat_context(documents: list[Document], max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """All chunks of every document, one headed section per document."""
    parts = [
        f"--- Document: {d.filename} ---\n" + SEPARATOR.join(c.text for c in d.chunks)
        for d in documents
    ]
    return _truncate(SEPARATOR.join(parts), max_chars, FLAT_TRUNCATION_MARKER)


def _truncate(text: str, max_chars: int, marker: str) -> str:
    if len(text) > max_chars:
        return text[:max_chars] + marker
    return text
