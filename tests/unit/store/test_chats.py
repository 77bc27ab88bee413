"""Tests for per-owner chat transcript storage."""

from __future__ import annotations

import json
import logging

import pytest

from docqa.store.blob import InMemoryBlobStore
from docqa.store.chats import ChatStore

_MESSAGES = [
    {"role": "user", "parts": [{"type": "text", "text": "What is the max voltage?"}]},
    {"role": "assistant", "parts": [{"type": "text", "text": "28 V [Source: manual.pdf]"}]},
]


def test_save_and_get(memory_blob):
    chats = ChatStore(memory_blob)
    saved = chats.save("alice", "c1", "Max voltage", _MESSAGES)
    loaded = chats.get("alice", "c1")
    assert loaded is not None
    assert loaded.id == "c1"
    assert loaded.title == "Max voltage"
    assert loaded.messages == _MESSAGES
    assert loaded.updated_at == saved.updated_at > 0


def test_save_overwrites(memory_blob):
    chats = ChatStore(memory_blob)
    chats.save("alice", "c1", "First", _MESSAGES[:1])
    chats.save("alice", "c1", "First", _MESSAGES)
    assert chats.get("alice", "c1").messages == _MESSAGES
    assert len(chats.list("alice")) == 1


def test_blob_layout(memory_blob):
    ChatStore(memory_blob).save("alice", "c1", "Title", _MESSAGES)
    payload = json.loads(memory_blob.get("users/alice/chats/c1.json"))
    assert set(payload) == {"id", "title", "messages", "updatedAt"}
    manifest = json.loads(memory_blob.get("users/alice/chats/_chats_manifest.json"))
    assert manifest["entries"]["c1"]["title"] == "Title"


def test_list_most_recent_first(memory_blob):
    chats = ChatStore(memory_blob)
    chats.save("alice", "old", "Old", [])
    chats.save("alice", "new", "New", [])
    # Pin timestamps so ordering does not depend on clock resolution.
    manifest = {"entries": {"old": {"title": "Old", "updatedAt": 1}, "new": {"title": "New", "updatedAt": 2}}}
    memory_blob.put("users/alice/chats/_chats_manifest.json", json.dumps(manifest).encode(), overwrite=True)
    listed = chats.list("alice")
    assert [c.id for c in listed] == ["new", "old"]
    assert all(c.messages == [] for c in listed)


def test_owners_isolated(memory_blob):
    chats = ChatStore(memory_blob)
    chats.save("alice", "c1", "Mine", _MESSAGES)
    assert chats.get("bob", "c1") is None
    assert chats.list("bob") == []


def test_delete(memory_blob):
    chats = ChatStore(memory_blob)
    chats.save("alice", "c1", "One", _MESSAGES)
    chats.save("alice", "c2", "Two", _MESSAGES)
    chats.delete("alice", "c1")
    assert chats.get("alice", "c1") is None
    assert [c.id for c in chats.list("alice")] == ["c2"]


def test_owner_required(memory_blob):
    chats = ChatStore(memory_blob)
    with pytest.raises(ValueError, match="owner"):
        chats.save("", "c1", "x", [])
    with pytest.raises(ValueError):
        chats.list("")


def test_without_blob_store_nothing_persists():
    chats = ChatStore()
    saved = chats.save("alice", "c1", "Title", _MESSAGES)
    assert saved.title == "Title"
    assert chats.get("alice", "c1") is None
    assert chats.list("alice") == []
    chats.delete("alice", "c1")


def test_corrupt_transcript_reads_as_missing(memory_blob):
    memory_blob.put("users/alice/chats/c1.json", b"{broken")
    assert ChatStore(memory_blob).get("alice", "c1") is None


class _FullDiskBlob(InMemoryBlobStore):
    def put(self, key, data, **kwargs):
        raise OSError("disk full")


def test_failed_save_is_logged_and_returns_chat(caplog):
    chats = ChatStore(_FullDiskBlob())
    with caplog.at_level(logging.WARNING, logger="docqa"):
        saved = chats.save("alice", "c1", "Title", _MESSAGES)
    assert saved.id == "c1"
    assert saved.messages == _MESSAGES
    assert "Could not save chat c1" in caplog.text
    assert chats.get("alice", "c1") is None


def test_failed_manifest_write_keeps_transcript(caplog):
    class _ManifestFails(InMemoryBlobStore):
        def put(self, key, data, **kwargs):
            if key.endswith("_chats_manifest.json"):
                raise OSError("disk full")
            super().put(key, data, **kwargs)

    chats = ChatStore(_ManifestFails())
    with caplog.at_level(logging.WARNING, logger="docqa"):
        saved = chats.save("alice", "c1", "Title", _MESSAGES)
    assert saved.title == "Title"
    assert chats.get("alice", "c1").messages == _MESSAGES
    assert chats.list("alice") == []
    assert "Could not save chat c1" in caplog.text
