"""Domain models for documents, chunks, and chat transcripts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Chunk:
    text: str
    index: int
    embedding: list[float] | None = None

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"text": self.text, "index": self.index}
        if self.embedding:
            payload["embedding"] = list(self.embedding)
        return payload

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Chunk:
        embedding = data.get("embedding")
        return cls(
            text=str(data["text"]),
            index=int(data["index"]),
            embedding=[float(v) for v in embedding] if embedding else None,
        )


@dataclass
class Document:
    """A parsed, chunked upload. Immutable once stored.

    ``uploaded_at`` is epoch milliseconds. ``embedding_model`` names the model
    that produced the chunk vectors (None when no chunk is embedded or for
    documents written before the model was recorded).
    """

    id: str
    filename: str
    chunks: list[Chunk] = field(default_factory=list)
    full_text: str = ""
    uploaded_at: int = 0
    owner_id: str | None = None
    embedding_model: str | None = None

    @property
    def is_embedded(self) -> bool:
        return any(c.has_embedding for c in self.chunks)

    def to_payload(self) -> dict[str, Any]:
        """Persisted layout: {id, filename, chunks[], fullText, uploadedAt}."""
        payload: dict[str, Any] = {
            "id": self.id,
            "filename": self.filename,
            "chunks": [c.to_payload() for c in self.chunks],
            "fullText": self.full_text,
            "uploadedAt": self.uploaded_at,
        }
        if self.embedding_model:
            payload["embeddingModel"] = self.embedding_model
        return payload

    @classmethod
    def from_payload(cls, data: dict[str, Any], owner_id: str | None = None) -> Document:
        chunks = [Chunk.from_payload(c) for c in data.get("chunks", [])]
        chunks.sort(key=lambda c: c.index)
        return cls(
            id=str(data["id"]),
            filename=str(data.get("filename", "")),
            chunks=chunks,
            full_text=str(data.get("fullText", "")),
            uploaded_at=int(data.get("uploadedAt", 0)),
            owner_id=owner_id,
            embedding_model=data.get("embeddingModel"),
        )


@dataclass
class DocumentMeta:
    id: str
    filename: str
    uploaded_at: int


@dataclass
class StoredChat:
    id: str
    title: str
    messages: list[Any] = field(default_factory=list)
    updated_at: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "messages": self.messages,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> StoredChat:
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "Chat")),
            messages=list(data.get("messages", [])),
            updated_at=int(data.get("updatedAt", 0)),
        )
