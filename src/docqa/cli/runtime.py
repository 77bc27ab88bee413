"""Per-invocation wiring shared by the CLI commands.

Each command builds one Runtime: merged config, one blob store, one
DocumentStore (the process-wide cache), a ChatStore and the Embedder.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Iterator

import typer
from rich.console import Console

from docqa.cli.errors import err_invalid_config, warn_cache_only
from docqa.config import ConfigError, DocqaConfig, load_config
from docqa.ingest.chunker import Chunker
from docqa.rag.embedder import Embedder
from docqa.store.blob import SqliteBlobStore
from docqa.store.chats import ChatStore
from docqa.store.documents import DocumentStore

console = Console()

StoreOption = Annotated[
    Path | None,
    typer.Option("--store", help="SQLite file for durable storage (overrides storage.path)."),
]
OwnerOption = Annotated[
    str | None,
    typer.Option("--owner", envvar="DOCQA_OWNER", help="Owner scope for documents and chats."),
]


@dataclass
class Runtime:
    config: DocqaConfig
    documents: DocumentStore
    chats: ChatStore
    embedder: Embedder
    blob: SqliteBlobStore | None = None

    def chunker(self) -> Chunker:
        return Chunker(self.config.chunking.chunk_size, self.config.chunking.overlap)

    def close(self) -> None:
        if self.blob is not None:
            self.blob.close()


@contextmanager
def open_runtime(store: Path | None = None, *, quiet: bool = False) -> Iterator[Runtime]:
    """Load config and open stores; exits with code 1 on invalid config."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_invalid_config(str(exc)))
        raise typer.Exit(1)

    if store is not None:
        cfg.storage.path = str(store)

    blob = SqliteBlobStore(cfg.storage.path) if cfg.storage.path else None
    if blob is None and not quiet:
        console.print(warn_cache_only())

    runtime = Runtime(
        config=cfg,
        documents=DocumentStore(blob),
        chats=ChatStore(blob),
        embedder=Embedder(cfg.embedding.model),
        blob=blob,
    )
    try:
        yield runtime
    finally:
        runtime.close()
