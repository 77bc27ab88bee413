"""docqa storage layer: blob stores, document store, chat transcripts."""

from docqa.store.blob import BlobExistsError, BlobStore, InMemoryBlobStore, SqliteBlobStore
from docqa.store.chats import ChatStore
from docqa.store.documents import DocumentStore
from docqa.store.models import Chunk, Document, DocumentMeta, StoredChat

__all__ = [
    "BlobExistsError",
    "BlobStore",
    "ChatStore",
    "Chunk",
    "Document",
    "DocumentMeta",
    "DocumentStore",
    "InMemoryBlobStore",
    "SqliteBlobStore",
    "StoredChat",
]
