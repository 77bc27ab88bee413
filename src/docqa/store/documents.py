"""Document store: in-process cache in front of an optional durable blob store.

Reads check the cache first and fall back to the blob store, populating the
cache on a hit. Writes land in the cache immediately; durable persistence is
best-effort, so blob failures are logged and never reach the caller.

Blob key layout (flat key space, prefixed per owner scope):

  docs/{id}.json                       global / legacy scope
  users/{owner}/docs/{id}.json         owner scope
  users/{owner}/docs/_manifest.json    owner scope listing: id -> {filename, uploadedAt}

Cache keys are ``(owner, id)`` tuples, with ``None`` as the owner of the global
scope. No id string can address another scope's entry.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from docqa.store.blob import BlobStore
from docqa.store.models import Document, DocumentMeta

logger = logging.getLogger(__name__)

_LEGACY_PREFIX = "docs/"
_USER_PREFIX = "users/"
_MANIFEST_NAME = "_manifest.json"


def scope_prefix(owner: str | None) -> str:
    """Blob key prefix for *owner*'s documents (legacy prefix when None)."""
    return f"{_USER_PREFIX}{owner}/docs/" if owner else _LEGACY_PREFIX


def cache_key(doc_id: str, owner: str | None) -> tuple[str | None, str]:
    return (owner or None, doc_id)


class DocumentStore:
    """Single read/write interface over the cache and the durable store.

    One instance is created per process and handed to every component that
    needs documents (upload pipeline, context assembler, CLI commands).

    Args:
        blob: Durable blob store, or None to run cache-only.
    """

    def __init__(self, blob: BlobStore | None = None) -> None:
        self._blob = blob
        self._cache: dict[tuple[str | None, str], Document] = {}

    @property
    def durable(self) -> bool:
        return self._blob is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put(self, document: Document) -> None:
        """Cache *document*, then persist it (best-effort)."""
        owner = document.owner_id
        self._cache[cache_key(document.id, owner)] = document
        if self._blob is None:
            return
        try:
            self._persist(self._blob, document)
        except Exception:
            logger.warning(
                "Durable write failed for document %s (owner=%s); kept in cache only",
                document.id,
                owner,
                exc_info=True,
            )

    def delete(self, doc_id: str, owner: str | None = None) -> None:
        """Remove a document from the cache, the blob store and the manifest."""
        self._cache.pop(cache_key(doc_id, owner), None)
        if self._blob is None:
            return
        prefix = scope_prefix(owner)
        try:
            self._blob.delete(f"{prefix}{doc_id}.json")
            if owner:
                manifest = self._read_manifest(owner)
                if manifest.pop(doc_id, None) is not None:
                    self._write_manifest(self._blob, owner, manifest)
        except Exception:
            logger.warning("Durable delete failed for document %s", doc_id, exc_info=True)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, doc_id: str, owner: str | None = None) -> Document | None:
        """Return the document, or None when neither cache nor blob store has it."""
        key = cache_key(doc_id, owner)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        document = self._load(doc_id, owner)
        if document is not None:
            self._cache[key] = document
        return document

    def get_many(self, doc_ids: list[str], owner: str | None = None) -> list[Document]:
        """Resolve *doc_ids* in order, silently skipping unknown ids."""
        documents: list[Document] = []
        for doc_id in doc_ids:
            document = self.get(doc_id, owner)
            if document is not None:
                documents.append(document)
        return documents

    def list_ids(self, owner: str | None = None) -> set[str]:
        """Known document ids for a scope.

        Owner scope relies on the durable manifest alone. The global scope
        merges blob listing with whatever is in the cache.
        """
        if owner:
            return set(self._read_manifest(owner))

        ids = {doc_id for scope, doc_id in self._cache if scope is None}
        if self._blob is not None:
            try:
                keys = self._blob.list(_LEGACY_PREFIX)
            except Exception:
                logger.warning("Durable listing failed for global scope", exc_info=True)
                keys = []
            for k in keys:
                name = k[len(_LEGACY_PREFIX):]
                if "/" in name or not name.endswith(".json") or name == _MANIFEST_NAME:
                    continue
                ids.add(name[: -len(".json")])
        return ids

    def list_documents(self, owner: str | None) -> list[DocumentMeta]:
        """Manifest metadata for *owner*, oldest first. Empty for the global scope."""
        if not owner:
            return []
        entries = [
            DocumentMeta(
                id=doc_id,
                filename=str(meta.get("filename", "")),
                uploaded_at=int(meta.get("uploadedAt", 0)),
            )
            for doc_id, meta in self._read_manifest(owner).items()
        ]
        entries.sort(key=lambda m: m.uploaded_at)
        return entries

    # ------------------------------------------------------------------
    # Blob helpers
    # ------------------------------------------------------------------

    def _persist(self, blob: BlobStore, document: Document) -> None:
        """Write the document object, then update the owner manifest.

        Two sequential writes: a failure in between leaves the document
        stored but unlisted.
        """
        owner = document.owner_id
        key = f"{scope_prefix(owner)}{document.id}.json"
        blob.put(
            key,
            json.dumps(document.to_payload()).encode("utf-8"),
            private=True,
            content_type="application/json",
        )
        if owner:
            manifest = self._read_manifest(owner)
            manifest[document.id] = {
                "filename": document.filename,
                "uploadedAt": document.uploaded_at,
            }
            self._write_manifest(blob, owner, manifest)

    def _load(self, doc_id: str, owner: str | None) -> Document | None:
        if self._blob is None:
            return None
        try:
            raw = self._blob.get(f"{scope_prefix(owner)}{doc_id}.json")
            if raw is None:
                return None
            return Document.from_payload(json.loads(raw), owner_id=owner)
        except Exception:
            logger.warning("Durable read failed for document %s", doc_id, exc_info=True)
            return None

    def _read_manifest(self, owner: str) -> dict[str, dict[str, Any]]:
        """Return the manifest entries for *owner* ({} when missing or unreadable)."""
        if self._blob is None:
            return {}
        try:
            raw = self._blob.get(f"{scope_prefix(owner)}{_MANIFEST_NAME}")
            if raw is None:
                return {}
            entries = json.loads(raw).get("entries") or {}
            return dict(entries)
        except Exception:
            logger.warning("Could not read document manifest for owner %s", owner, exc_info=True)
            return {}

    def _write_manifest(self, blob: BlobStore, owner: str, entries: dict[str, dict[str, Any]]) -> None:
        blob.put(
            f"{scope_prefix(owner)}{_MANIFEST_NAME}",
            json.dumps({"entries": entries}).encode("utf-8"),
            private=True,
            content_type="application/json",
            overwrite=True,
        )
