"""docqa chats: saved chat transcripts.

Commands:
  docqa chats list --owner ID             saved chats, most recent first
  docqa chats show CHAT_ID --owner ID     print a transcript
  docqa chats delete CHAT_ID --owner ID   delete a transcript
"""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from docqa.cli.errors import err_chat_not_found, err_owner_required
from docqa.cli.runtime import OwnerOption, StoreOption, open_runtime
from docqa.rag.chat import parse_messages

console = Console()

chats_app = typer.Typer(
    name="chats",
    help="Saved chat transcripts (list, show, delete).",
    add_completion=False,
)


@chats_app.command("list")
def chats_list_cmd(owner: OwnerOption = None, store: StoreOption = None) -> None:
    """List saved chats, most recent first."""
    if not owner:
        console.print(err_owner_required("list chats"))
        raise typer.Exit(1)
    with open_runtime(store, quiet=True) as rt:
        chats = rt.chats.list(owner)
    if not chats:
        console.print("[yellow]No saved chats.[/]")
        raise typer.Exit(0)
    for c in chats:
        console.print(f"{c.id}  [bold]{escape(c.title)}[/]", highlight=False)


@chats_app.command("show")
def chats_show_cmd(
    chat_id: Annotated[str, typer.Argument(help="Chat id.")],
    owner: OwnerOption = None,
    store: StoreOption = None,
) -> None:
    """Print a saved chat transcript."""
    if not owner:
        console.print(err_owner_required("load chats"))
        raise typer.Exit(1)
    with open_runtime(store, quiet=True) as rt:
        stored = rt.chats.get(owner, chat_id)
    if stored is None:
        console.print(err_chat_not_found(chat_id))
        raise typer.Exit(1)
    console.print(f"[bold]{escape(stored.title)}[/]\n")
    try:
        messages = parse_messages(stored.messages)
    except ValueError:
        messages = []
    for m in messages:
        console.print(f"[bold]{m.role}:[/] {escape(m.text)}\n", highlight=False)


@chats_app.command("delete")
def chats_delete_cmd(
    chat_id: Annotated[str, typer.Argument(help="Chat id.")],
    owner: OwnerOption = None,
    store: StoreOption = None,
) -> None:
    """Delete a saved chat."""
    if not owner:
        console.print(err_owner_required("delete chats"))
        raise typer.Exit(1)
    with open_runtime(store, quiet=True) as rt:
        rt.chats.delete(owner, chat_id)
    console.print(f"[green]✓[/] Deleted chat: {escape(chat_id)}")
