"""LiteLLM client wrapper: API key checks, streamed completion, embeddings.

All completion and embedding calls route through this module.
Completion uses LiteLLM's built-in retry (num_retries=3, exponential backoff).
Embedding helpers raise on provider failure; the Embedder capability decides
how to degrade.
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import litellm

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True
litellm.set_verbose = False  # type: ignore[assignment]


# ------------------------------------------------------------------
# Provider → env var mapping for API key validation
# ------------------------------------------------------------------

_PROVIDER_ENV: dict[str, str | None] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "azure": "AZURE_API_KEY",
    "cohere": "COHERE_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "google": "GOOGLE_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "groq": "GROQ_API_KEY",
    "together_ai": "TOGETHERAI_API_KEY",
    "voyage": "VOYAGE_API_KEY",
    "ollama": None,  # Local, no key required
    "ollama_chat": None,
}


def provider_of(model: str) -> str:
    """Provider prefix of a LiteLLM model string; bare names are OpenAI models."""
    return model.split("/")[0].lower() if "/" in model else "openai"


def required_env_var(model: str) -> str | None:
    """Env var holding the API key for *model*'s provider (None when none is needed)."""
    provider = provider_of(model)
    return _PROVIDER_ENV.get(provider, f"{provider.upper()}_API_KEY")


def has_api_key(model: str) -> bool:
    env_var = required_env_var(model)
    return env_var is None or bool(os.getenv(env_var))


def validate_api_key(model: str) -> None:
    """Check that the required API key env var is set for *model*.

    Raises:
        EnvironmentError: If the required key is missing from environment.
    """
    if not has_api_key(model):
        raise EnvironmentError(
            f"API key not found for provider '{provider_of(model)}'. "
            f"Set the {required_env_var(model)} environment variable."
        )


def stream_completion(
    model: str,
    messages: list[dict],
    max_tokens: int = 2048,
    temperature: float = 0.2,
    num_retries: int = 3,
) -> Iterator[str]:
    """Call litellm.completion(stream=True) and yield text deltas as they arrive.

    Raises:
        litellm.exceptions.APIError: On persistent API failure after retries.
    """
    response = litellm.completion(
        model=model,
        messages=messages,
        max_tokens=max_tokens,
        temperature=temperature,
        num_retries=num_retries,
        stream=True,
    )
    for part in response:
        delta = part.choices[0].delta.content if part.choices else None
        if delta:
            yield delta


def embed(model: str, text: str) -> list[float]:
    """Embed a single string. Returns the embedding vector."""
    response = litellm.embedding(model=model, input=[text])
    return list(response.data[0]["embedding"])


def embed_many(model: str, texts: list[str]) -> list[list[float]]:
    """Embed *texts* in one request. Vectors are returned in input order."""
    response = litellm.embedding(model=model, input=list(texts))
    return [list(row["embedding"]) for row in response.data]
