"""docqa list / show / remove: document lifecycle commands.

Usage:
  docqa list [--owner ID]
  docqa show DOC_ID [--owner ID]
  docqa remove DOC_ID [--owner ID] [--yes]
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docqa.cli.errors import err_document_not_found
from docqa.cli.runtime import OwnerOption, StoreOption, open_runtime

console = Console()


def _fmt_ms(epoch_ms: int) -> str:
    if not epoch_ms:
        return ""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def list_cmd(
    owner: OwnerOption = None,
    store: StoreOption = None,
) -> None:
    """List stored documents (with filenames when an owner is given)."""
    with open_runtime(store) as rt:
        if owner:
            docs = rt.documents.list_documents(owner)
            if not docs:
                console.print(f"[yellow]No documents for owner '{escape(owner)}'.[/]")
                raise typer.Exit(0)
            table = Table(title="Documents", show_header=True, header_style="bold")
            table.add_column("ID")
            table.add_column("Filename", style="bold")
            table.add_column("Uploaded")
            for meta in docs:
                table.add_row(meta.id, escape(meta.filename), _fmt_ms(meta.uploaded_at))
            console.print(table)
            return

        ids = sorted(rt.documents.list_ids())
        if not ids:
            console.print("[yellow]No documents stored.[/]")
            raise typer.Exit(0)
        for doc_id in ids:
            console.print(doc_id, highlight=False)
        console.print(f"\n  {len(ids)} document(s)")


def show_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document id.")],
    owner: OwnerOption = None,
    store: StoreOption = None,
) -> None:
    """Show a document's filename, chunk count and embedding status."""
    with open_runtime(store, quiet=True) as rt:
        document = rt.documents.get(doc_id, owner)
    if document is None:
        console.print(err_document_not_found(doc_id))
        raise typer.Exit(1)

    embedded = (
        f"[green]yes[/] ({escape(document.embedding_model or 'unknown model')})"
        if document.is_embedded
        else "[dim]no[/]"
    )
    console.print(f"[bold]{escape(document.filename)}[/]")
    console.print(f"  id:        {document.id}")
    console.print(f"  uploaded:  {_fmt_ms(document.uploaded_at)}")
    console.print(f"  chunks:    {len(document.chunks)}")
    console.print(f"  chars:     {len(document.full_text):,}")
    console.print(f"  embedded:  {embedded}")


def remove_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document id to remove.")],
    owner: OwnerOption = None,
    store: StoreOption = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove a document from the store."""
    with open_runtime(store, quiet=True) as rt:
        document = rt.documents.get(doc_id, owner)
        if document is None:
            console.print(err_document_not_found(doc_id))
            raise typer.Exit(0)

        console.print(
            f"\nRemove document: [bold]{escape(document.filename)}[/] "
            f"({len(document.chunks)} chunks)"
        )
        if not yes:
            if not typer.confirm("Confirm removal?", default=False):
                console.print("[dim]Cancelled.[/]")
                raise typer.Exit(0)

        rt.documents.delete(doc_id, owner)

    console.print(f"[green]✓[/] Removed: {doc_id}")
