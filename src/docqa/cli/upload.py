"""docqa upload: extract, chunk, embed and store a PDF or text file."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from docqa.cli.errors import err_file_not_found, err_upload_rejected
from docqa.cli.runtime import OwnerOption, StoreOption, open_runtime
from docqa.ingest.extract import UploadValidationError
from docqa.ingest.upload import ingest_upload, summarize

console = Console()


def upload_cmd(
    file: Annotated[Path, typer.Argument(help="PDF or text file to upload.")],
    owner: OwnerOption = None,
    store: StoreOption = None,
) -> None:
    """Upload a document so it can be used as chat context."""
    if not file.is_file():
        console.print(err_file_not_found(str(file)))
        raise typer.Exit(1)

    data = file.read_bytes()
    content_type, _ = mimetypes.guess_type(file.name)

    with open_runtime(store) as rt:
        embedding = rt.embedder.available()
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=console,
        ) as prog:
            prog.add_task("Extracting, chunking and embedding…" if embedding else "Extracting and chunking…", total=None)
            try:
                document = ingest_upload(
                    data,
                    file.name,
                    rt.documents,
                    rt.embedder,
                    content_type=content_type,
                    owner=owner,
                    chunker=rt.chunker(),
                    max_bytes=rt.config.upload.max_bytes,
                )
            except UploadValidationError as exc:
                prog.stop()
                console.print(err_upload_rejected(file.name, str(exc)))
                raise typer.Exit(1)

    result = summarize(document)
    console.print(f"[green]✓[/] Uploaded [bold]{escape(result.filename)}[/]")
    console.print(f"  id:      {result.doc_id}")
    console.print(f"  chunks:  {result.chunks_count}" + ("  (embedded)" if result.embedded else ""))
    console.print(f"  [dim]{escape(result.preview)}[/]", highlight=False)
