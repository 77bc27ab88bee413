"""Upload pipeline: validate, extract, chunk, embed, store.

A document is only created once extraction yields non-empty text. Embedding
is optional: when the embedder is unavailable or fails, the document is
stored without vectors and chat falls back to flat context.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass

from docqa.ingest.chunker import Chunker
from docqa.ingest.extract import UnsupportedTypeError, UploadValidationError, detect_kind, extract_text
from docqa.rag.embedder import Embedder
from docqa.store.documents import DocumentStore
from docqa.store.models import Document

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
_PREVIEW_CHARS = 200


@dataclass
class UploadResult:
    doc_id: str
    filename: str
    chunks_count: int
    embedded: bool
    preview: str


def validate_upload(
    data: bytes | None,
    filename: str,
    content_type: str | None = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> bytes:
    """Return *data* once it passes, else raise UploadValidationError.

    Missing, unsupported, and oversize files are rejected.
    """
    if data is None or not filename:
        raise UploadValidationError("No file provided")
    if detect_kind(filename, content_type) == "unknown":
        raise UnsupportedTypeError("Only PDF and text files are supported")
    if len(data) > max_bytes:
        raise UploadValidationError(f"File too large (max {max_bytes // (1024 * 1024)} MB)")
    return data


def ingest_upload(
    data: bytes | None,
    filename: str,
    store: DocumentStore,
    embedder: Embedder | None = None,
    *,
    content_type: str | None = None,
    owner: str | None = None,
    chunker: Chunker | None = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> Document:
    """Turn an uploaded file into a stored Document.

    Raises:
        UploadValidationError: Missing/unsupported/oversize file, unreadable
            content, or no extractable text.
    """
    data = validate_upload(data, filename, content_type, max_bytes)
    text = extract_text(data, filename, content_type).strip()
    if not text:
        raise UploadValidationError(f"No text could be extracted from '{filename}'")

    chunks = (chunker or Chunker()).split(text)
    embedding_model: str | None = None
    if embedder is not None and chunks and embedder.available():
        vectors = embedder.embed_batch([c.text for c in chunks])
        if vectors is not None:
            for chunk, vector in zip(chunks, vectors):
                chunk.embedding = vector
            embedding_model = embedder.model
        else:
            logger.info("Storing '%s' without embeddings", filename)

    document = Document(
        id=str(uuid.uuid4()),
        filename=filename,
        chunks=chunks,
        full_text=text,
        uploaded_at=int(time.time() * 1000),
        owner_id=owner,
        embedding_model=embedding_model,
    )
    store.put(document)
    logger.debug("Stored document %s (%d chunks)", document.id, len(chunks))
    return document


def summarize(document: Document) -> UploadResult:
    text = document.full_text
    preview = text[:_PREVIEW_CHARS] + ("…" if len(text) > _PREVIEW_CHARS else "")
    return UploadResult(
        doc_id=document.id,
        filename=document.filename,
        chunks_count=len(document.chunks),
        embedded=document.is_embedded,
        preview=preview,
    )
