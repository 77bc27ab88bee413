"""Tests for the upload pipeline: validate → extract → chunk → embed → store."""

from __future__ import annotations

import json

import pytest

from docqa.ingest.chunker import Chunker
from docqa.ingest.extract import UnsupportedTypeError, UploadValidationError
from docqa.ingest.upload import DEFAULT_MAX_BYTES, ingest_upload, summarize, validate_upload
from docqa.rag.embedder import Embedder
from docqa.store.documents import DocumentStore

_TEXT = ("The pump must be primed before first use. " * 30).encode("utf-8")


# ------------------------------------------------------------------
# validate_upload
# ------------------------------------------------------------------


def test_missing_file_rejected():
    with pytest.raises(UploadValidationError, match="No file provided"):
        validate_upload(None, "a.txt")


def test_missing_filename_rejected():
    with pytest.raises(UploadValidationError, match="No file provided"):
        validate_upload(b"data", "")


def test_unsupported_type_rejected():
    with pytest.raises(UploadValidationError, match="Only PDF and text files are supported"):
        validate_upload(b"MZ", "setup.exe")


def test_oversize_rejected():
    with pytest.raises(UploadValidationError, match="File too large"):
        validate_upload(b"x" * 11, "a.txt", max_bytes=10)


def test_default_limit_message_names_megabytes():
    with pytest.raises(UploadValidationError, match=r"max 10 MB"):
        validate_upload(b"x" * (DEFAULT_MAX_BYTES + 1), "a.txt")


def test_limit_is_inclusive():
    assert validate_upload(b"x" * 10, "a.txt", max_bytes=10) == b"x" * 10


# ------------------------------------------------------------------
# ingest_upload
# ------------------------------------------------------------------


def test_text_upload_stored_without_embeddings(store):
    doc = ingest_upload(_TEXT, "pump.txt", store)
    assert doc.filename == "pump.txt"
    assert doc.chunks
    assert not doc.is_embedded
    assert doc.embedding_model is None
    assert doc.full_text.startswith("The pump must be primed")
    assert doc.uploaded_at > 0
    assert store.get(doc.id) is doc


def test_upload_ids_are_unique(store):
    first = ingest_upload(_TEXT, "a.txt", store)
    second = ingest_upload(_TEXT, "a.txt", store)
    assert first.id != second.id


def test_custom_chunker_used(store):
    doc = ingest_upload(_TEXT, "pump.txt", store, chunker=Chunker(100, 10))
    assert len(doc.chunks) > 10
    assert all(len(c.text) <= 100 for c in doc.chunks)


def test_embedder_vectors_attached(store, stub_embedder):
    embedder = stub_embedder(query_vector=[1.0, 0.0])
    doc = ingest_upload(_TEXT, "pump.txt", store, embedder)
    assert doc.is_embedded
    assert all(c.embedding == [float(len(c.text)), 1.0] for c in doc.chunks)
    assert doc.embedding_model == embedder.model


def test_unavailable_embedder_skipped(store, stub_embedder):
    doc = ingest_upload(_TEXT, "pump.txt", store, stub_embedder(available=False))
    assert not doc.is_embedded
    assert doc.embedding_model is None


def test_no_api_key_stores_plain_document(store):
    # conftest clears OPENAI_API_KEY, so the real embedder is unavailable.
    doc = ingest_upload(_TEXT, "pump.txt", store, Embedder())
    assert not doc.is_embedded


def test_failed_embedding_stores_plain_document(store, stub_embedder):
    class Failing(stub_embedder):
        def embed_batch(self, texts):
            return None

    doc = ingest_upload(_TEXT, "pump.txt", store, Failing())
    assert doc.chunks
    assert not doc.is_embedded


def test_whitespace_only_text_rejected(store):
    with pytest.raises(UploadValidationError, match="No text could be extracted"):
        ingest_upload(b" \n\t \n", "blank.txt", store)
    assert store.list_ids() == set()


def test_unsupported_upload_creates_nothing(store):
    with pytest.raises(UploadValidationError):
        ingest_upload(b"GIF89a", "cat.gif", store)
    assert store.list_ids() == set()


def test_unsupported_upload_raises_type_error(store):
    with pytest.raises(UnsupportedTypeError):
        ingest_upload(b"GIF89a", "cat.gif", store)


def test_owner_upload_persisted_with_manifest(memory_blob):
    store = DocumentStore(memory_blob)
    doc = ingest_upload(_TEXT, "pump.txt", store, owner="alice")
    assert doc.owner_id == "alice"
    manifest = json.loads(memory_blob.get("users/alice/docs/_manifest.json"))
    assert manifest["entries"][doc.id]["filename"] == "pump.txt"
    assert memory_blob.get(f"users/alice/docs/{doc.id}.json") is not None


# ------------------------------------------------------------------
# summarize
# ------------------------------------------------------------------


def test_summary_preview_truncated(store):
    doc = ingest_upload(_TEXT, "pump.txt", store)
    result = summarize(doc)
    assert result.doc_id == doc.id
    assert result.chunks_count == len(doc.chunks)
    assert result.embedded is False
    assert result.preview == doc.full_text[:200] + "…"


def test_summary_short_text_not_marked(store):
    doc = ingest_upload(b"Short note.", "note.txt", store)
    assert summarize(doc).preview == "Short note."
