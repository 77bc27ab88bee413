"""docqa CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from docqa.cli.ask import ask_cmd, context_cmd
from docqa.cli.chats import chats_app
from docqa.cli.documents import list_cmd, remove_cmd, show_cmd
from docqa.cli.upload import upload_cmd
from docqa.log import configure_logging


def _installed_version() -> str:
    try:
        return importlib.metadata.version("docqa")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"docqa {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="docqa",
    help=(
        "docqa: ask questions about your PDF and text documents.\n\n"
        "  docqa upload FILE          Extract, chunk and embed a document.\n"
        "  docqa ask QUESTION -d ID   Stream an answer grounded in the selected documents."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log debug output to stderr."),
    ] = False,
) -> None:
    """docqa: document question answering."""
    configure_logging(verbose)


app.command("upload")(upload_cmd)
app.command("list")(list_cmd)
app.command("show")(show_cmd)
app.command("remove")(remove_cmd)
app.command("context")(context_cmd)
app.command("ask")(ask_cmd)
app.add_typer(chats_app, name="chats")


@app.command("version")
def version_cmd() -> None:
    """Show the installed docqa version."""
    typer.echo(f"docqa {_installed_version()}")


if __name__ == "__main__":
    app()
