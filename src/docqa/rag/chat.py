"""Chat turn: message parsing, grounding prompt, streamed completion.

Messages arrive in the UI shape ``{"role": ..., "parts": [{"type": "text",
"text": ...}, ...]}`` (a plain ``{"role", "content": str}`` is accepted too).
Parts are a tagged variant: ``TextPart`` carries text, ``OtherPart`` keeps
any other kind (files, tool calls, reasoning) untouched so transcripts round
trip, but only text parts are ever read.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from docqa.rag import llm_client
from docqa.rag.assembler import DEFAULT_MAX_CHARS, DEFAULT_TOP_K, build_context
from docqa.rag.embedder import Embedder
from docqa.store.documents import DocumentStore

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_BASE = """\
You are a helpful assistant that answers questions based on the documents the user has uploaded.
- Answer only from the provided document context when relevant; otherwise say you don't have that information in the documents.
- When you use a specific passage from the context, cite it inline like [Source: filename] so the user knows which doc it came from.
- Be concise and accurate. If the user hasn't uploaded any documents yet, suggest they upload a PDF to get started."""

CONTEXT_HEADING = "## Document context (use this to answer):"

_ROLES = {"user", "assistant", "system"}
_TITLE_MAX = 80


@dataclass
class TextPart:
    text: str
    kind: str = "text"


@dataclass
class OtherPart:
    kind: str
    payload: dict[str, Any] = field(default_factory=dict)


Part = TextPart | OtherPart


@dataclass
class Message:
    role: str
    parts: list[Part] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))

    def first_text(self) -> str | None:
        for part in self.parts:
            if isinstance(part, TextPart):
                return part.text
        return None

    def to_dict(self) -> dict[str, Any]:
        parts: list[dict[str, Any]] = []
        for part in self.parts:
            if isinstance(part, TextPart):
                parts.append({"type": "text", "text": part.text})
            else:
                parts.append({**part.payload, "type": part.kind})
        return {"role": self.role, "parts": parts}


# ------------------------------------------------------------------
# Parsing
# ------------------------------------------------------------------


def parse_part(raw: Any) -> Part:
    if not isinstance(raw, dict):
        raise ValueError(f"message part must be an object, got {type(raw).__name__}")
    kind = str(raw.get("type", ""))
    if kind == "text" and isinstance(raw.get("text"), str):
        return TextPart(text=raw["text"])
    return OtherPart(kind=kind or "unknown", payload={k: v for k, v in raw.items() if k != "type"})


def parse_message(raw: Any) -> Message:
    if not isinstance(raw, dict):
        raise ValueError("each message must be an object")
    role = raw.get("role")
    if role not in _ROLES:
        raise ValueError(f"unsupported message role: {role!r}")
    if "parts" in raw:
        if not isinstance(raw["parts"], list):
            raise ValueError("message parts must be a list")
        return Message(role=role, parts=[parse_part(p) for p in raw["parts"]])
    content = raw.get("content")
    if not isinstance(content, str):
        raise ValueError("message needs either parts or string content")
    return Message(role=role, parts=[TextPart(text=content)])


def parse_messages(raw: Any) -> list[Message]:
    """Validate a request body's message list.

    Raises:
        ValueError: ``raw`` is not a list or contains a malformed message.
    """
    if not isinstance(raw, list):
        raise ValueError("messages required")
    return [parse_message(m) for m in raw]


# ------------------------------------------------------------------
# Prompt construction
# ------------------------------------------------------------------


def latest_user_query(messages: list[Message]) -> str | None:
    """First text part of the most recent user message, if it has one."""
    for message in reversed(messages):
        if message.role == "user":
            return message.first_text()
    return None


def build_system_prompt(context: str) -> str:
    if not context:
        return SYSTEM_PROMPT_BASE
    return f"{SYSTEM_PROMPT_BASE}\n\n{CONTEXT_HEADING}\n\n{context}"


def to_model_messages(messages: list[Message]) -> list[dict[str, str]]:
    """Provider message list: one ``{"role", "content"}`` per message, order kept."""
    return [{"role": m.role, "content": m.text} for m in messages]


def derive_title(messages: list[Message]) -> str:
    for message in messages:
        if message.role == "user":
            text = message.first_text()
            if text:
                return text[:_TITLE_MAX]
            break
    return "Chat"


# ------------------------------------------------------------------
# Streaming turn
# ------------------------------------------------------------------


def stream_answer(
    messages: list[Message],
    document_ids: list[str],
    store: DocumentStore,
    embedder: Embedder | None,
    model: str,
    owner: str | None = None,
    max_chars: int = DEFAULT_MAX_CHARS,
    top_k: int = DEFAULT_TOP_K,
) -> Iterator[str]:
    """Ground the conversation in the selected documents and stream the reply.

    Raises:
        EnvironmentError: No API key for the generation model.
    """
    llm_client.validate_api_key(model)
    started = time.monotonic()

    query = latest_user_query(messages)
    context = build_context(
        document_ids,
        store,
        embedder,
        max_chars=max_chars,
        query=query,
        owner=owner,
        top_k=top_k,
    )
    system = build_system_prompt(context)
    provider_messages = [{"role": "system", "content": system}, *to_model_messages(messages)]

    first_token_ms: float | None = None
    for delta in llm_client.stream_completion(model, provider_messages):
        if first_token_ms is None:
            first_token_ms = (time.monotonic() - started) * 1000
            logger.info("first token ms: %.0f", first_token_ms)
        yield delta
