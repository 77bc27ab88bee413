"""Embedding capability: optional, never raises on provider trouble.

The embedder is *available* only when the API key for its LiteLLM model is
present in the environment. Every embedding call returns ``None`` instead of
raising when the capability is unavailable, the input is empty, or the
provider fails (timeout, quota, auth). Callers fall back to keyword-style
context assembly on ``None``.
"""

from __future__ import annotations

import logging

from docqa.rag import llm_client

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODEL = "openai/text-embedding-3-small"


class Embedder:
    """Turn text into vectors with one LiteLLM embedding model.

    Args:
        model: LiteLLM embedding model string (provider/model format).
    """

    def __init__(self, model: str = DEFAULT_EMBEDDING_MODEL) -> None:
        self.model = model

    def available(self) -> bool:
        return llm_client.has_api_key(self.model)

    def embed_batch(self, texts: list[str]) -> list[list[float]] | None:
        """Embed *texts* in one request, or None when unavailable or on failure."""
        if not texts or not self.available():
            return None
        try:
            vectors = llm_client.embed_many(self.model, texts)
        except Exception:
            logger.warning("Embedding batch of %d texts failed (%s)", len(texts), self.model, exc_info=True)
            return None
        if len(vectors) != len(texts):
            logger.warning(
                "Embedding provider returned %d vectors for %d texts; discarding",
                len(vectors),
                len(texts),
            )
            return None
        return vectors

    def embed_query(self, text: str) -> list[float] | None:
        """Embed a single query string, or None for blank input, unavailability, or failure."""
        query = text.strip()
        if not query or not self.available():
            return None
        try:
            return llm_client.embed(self.model, query)
        except Exception:
            logger.warning("Query embedding failed (%s)", self.model, exc_info=True)
            return None
