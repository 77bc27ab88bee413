"""Per-owner chat transcript persistence over the blob store.

Keys: ``users/{owner}/chats/{id}.json`` plus ``users/{owner}/chats/_chats_manifest.json``
mapping chat id -> {title, updatedAt}. Without a blob store every call is a
no-op or returns nothing.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from docqa.store.blob import BlobStore
from docqa.store.models import StoredChat

logger = logging.getLogger(__name__)

_MANIFEST_NAME = "_chats_manifest.json"


def _prefix(owner: str) -> str:
    if not owner:
        raise ValueError("owner is required for chat storage")
    return f"users/{owner}/chats/"


class ChatStore:
    def __init__(self, blob: BlobStore | None = None) -> None:
        self._blob = blob

    def save(self, owner: str, chat_id: str, title: str, messages: list[Any]) -> StoredChat:
        """Write (or overwrite) a transcript and refresh its manifest entry.

        Storage failures are logged; the returned chat is valid either way.
        """
        chat = StoredChat(
            id=chat_id,
            title=title,
            messages=list(messages),
            updated_at=int(time.time() * 1000),
        )
        prefix = _prefix(owner)
        if self._blob is None:
            return chat
        try:
            self._blob.put(
                f"{prefix}{chat_id}.json",
                json.dumps(chat.to_payload()).encode("utf-8"),
                overwrite=True,
            )
            manifest = self._read_manifest(owner)
            manifest[chat_id] = {"title": title, "updatedAt": chat.updated_at}
            self._write_manifest(self._blob, owner, manifest)
        except Exception:
            logger.warning("Could not save chat %s for owner %s", chat_id, owner, exc_info=True)
        return chat

    def get(self, owner: str, chat_id: str) -> StoredChat | None:
        prefix = _prefix(owner)
        if self._blob is None:
            return None
        try:
            raw = self._blob.get(f"{prefix}{chat_id}.json")
            return StoredChat.from_payload(json.loads(raw)) if raw is not None else None
        except Exception:
            logger.warning("Could not read chat %s for owner %s", chat_id, owner, exc_info=True)
            return None

    def list(self, owner: str) -> list[StoredChat]:
        """Manifest entries (without messages), most recently updated first."""
        _prefix(owner)
        chats = [
            StoredChat(
                id=chat_id,
                title=str(meta.get("title", "Chat")),
                updated_at=int(meta.get("updatedAt", 0)),
            )
            for chat_id, meta in self._read_manifest(owner).items()
        ]
        chats.sort(key=lambda c: c.updated_at, reverse=True)
        return chats

    def delete(self, owner: str, chat_id: str) -> None:
        prefix = _prefix(owner)
        if self._blob is None:
            return
        try:
            self._blob.delete(f"{prefix}{chat_id}.json")
            manifest = self._read_manifest(owner)
            manifest.pop(chat_id, None)
            self._write_manifest(self._blob, owner, manifest)
        except Exception:
            logger.warning("Could not delete chat %s for owner %s", chat_id, owner, exc_info=True)

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    def _read_manifest(self, owner: str) -> dict[str, dict[str, Any]]:
        if self._blob is None:
            return {}
        try:
            raw = self._blob.get(f"{_prefix(owner)}{_MANIFEST_NAME}")
            return dict(json.loads(raw).get("entries") or {}) if raw is not None else {}
        except Exception:
            logger.warning("Could not read chat manifest for owner %s", owner, exc_info=True)
            return {}

    def _write_manifest(self, blob: BlobStore, owner: str, entries: dict[str, dict[str, Any]]) -> None:
        blob.put(
            f"{_prefix(owner)}{_MANIFEST_NAME}",
            json.dumps({"entries": entries}).encode("utf-8"),
            overwrite=True,
        )
