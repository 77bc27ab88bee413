"""docqa ask / context: grounded chat over uploaded documents.

  docqa context --doc ID [--doc ID ...] [--query Q]   print the context block
  docqa ask "question" --doc ID [--chat CHAT_ID]       stream a grounded answer

With ``--owner`` and ``--chat`` the conversation is loaded from and saved to
the chat store, so follow-up questions see earlier turns.
"""

from __future__ import annotations

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from docqa.cli.errors import err_no_api_key, err_owner_required
from docqa.cli.runtime import OwnerOption, StoreOption, open_runtime
from docqa.rag import llm_client
from docqa.rag.assembler import build_context
from docqa.rag.chat import Message, TextPart, derive_title, parse_messages, stream_answer

console = Console()
logger = logging.getLogger(__name__)

DocOption = Annotated[
    list[str] | None,
    typer.Option("--doc", "-d", help="Document id to ground on (repeatable)."),
]


def context_cmd(
    doc: DocOption = None,
    query: Annotated[
        str | None,
        typer.Option("--query", "-q", help="Question used for semantic ranking."),
    ] = None,
    max_chars: Annotated[
        int | None,
        typer.Option("--max-chars", min=0, help="Character budget (default: retrieval.max_chars)."),
    ] = None,
    owner: OwnerOption = None,
    store: StoreOption = None,
) -> None:
    """Print the context block a chat turn would receive."""
    with open_runtime(store, quiet=True) as rt:
        context = build_context(
            doc or [],
            rt.documents,
            rt.embedder,
            max_chars=max_chars if max_chars is not None else rt.config.retrieval.max_chars,
            query=query,
            owner=owner,
            top_k=rt.config.retrieval.top_k,
        )
    if not context:
        console.print("[yellow]No context:[/] none of the given documents were found.")
        raise typer.Exit(0)
    console.print(context, markup=False, highlight=False, soft_wrap=True)


def ask_cmd(
    question: Annotated[str, typer.Argument(help="Question to ask about the documents.")],
    doc: DocOption = None,
    chat: Annotated[
        str | None,
        typer.Option("--chat", help="Chat id: continue and save this conversation (needs --owner)."),
    ] = None,
    owner: OwnerOption = None,
    store: StoreOption = None,
) -> None:
    """Ask a question and stream an answer grounded in the selected documents."""
    if chat and not owner:
        console.print(err_owner_required("save chats"))
        raise typer.Exit(1)

    with open_runtime(store, quiet=True) as rt:
        model = rt.config.generation.model
        if not llm_client.has_api_key(model):
            console.print(err_no_api_key(model))
            raise typer.Exit(1)

        history: list[Message] = []
        if chat and owner:
            stored = rt.chats.get(owner, chat)
            if stored is not None:
                try:
                    history = parse_messages(stored.messages)
                except ValueError:
                    logger.warning("Ignoring malformed transcript for chat %s", chat)

        messages = [*history, Message(role="user", parts=[TextPart(text=question)])]

        reply: list[str] = []
        try:
            for delta in stream_answer(
                messages,
                doc or [],
                rt.documents,
                rt.embedder,
                model,
                owner=owner,
                max_chars=rt.config.retrieval.max_chars,
                top_k=rt.config.retrieval.top_k,
            ):
                reply.append(delta)
                console.print(delta, end="", markup=False, highlight=False, soft_wrap=True)
        except Exception as exc:
            console.print(f"\n[red]Error:[/] Chat failed: {escape(str(exc))}")
            raise typer.Exit(1)
        console.print()

        if chat and owner:
            messages.append(Message(role="assistant", parts=[TextPart(text="".join(reply))]))
            rt.chats.save(owner, chat, derive_title(messages), [m.to_dict() for m in messages])
