"""docqa rich error messages: actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from docqa.cli.errors import err_no_api_key
    console.print(err_no_api_key("openai"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape

from docqa.rag.llm_client import required_env_var


def err_no_api_key(model: str) -> str:
    """No API key for the provider of *model*.

    Example:
        No API key for 'openai'. Set:  export OPENAI_API_KEY=sk-...
    """
    provider = model.split("/")[0] if "/" in model else "openai"
    env_var = required_env_var(model) or f"{provider.upper()}_API_KEY"
    return (
        f"[red]Error:[/] No API key for '{escape(provider)}'.\n"
        f"  Set:  export {env_var}=sk-..."
    )


def err_upload_rejected(filename: str, reason: str) -> str:
    """Upload failed validation (type, size, unreadable, empty text)."""
    return (
        f"[red]Error:[/] Upload rejected: '{escape(filename)}'\n"
        f"  {escape(reason)}\n"
        "  Use a readable PDF or text file under the size limit."
    )


def err_file_not_found(path: str) -> str:
    return (
        f"[red]Error:[/] File not found: '{escape(path)}'\n"
        "  Check the path and run:  docqa upload <file>"
    )


def err_document_not_found(doc_id: str) -> str:
    """Document id unknown in the current owner scope."""
    return (
        f"[yellow]Document not found:[/] '{escape(doc_id)}'\n"
        "  Run:  docqa list  to see stored documents."
    )


def err_owner_required(action: str) -> str:
    """Chat persistence and document listing with metadata need an owner scope."""
    return (
        f"[red]Error:[/] An owner is required to {action}.\n"
        "  Use:  --owner <id>  or  export DOCQA_OWNER=<id>"
    )


def err_chat_not_found(chat_id: str) -> str:
    return (
        f"[yellow]Chat not found:[/] '{escape(chat_id)}'\n"
        "  Run:  docqa chats list  to see saved chats."
    )


def err_invalid_config(detail: str) -> str:
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {escape(detail)}\n"
        "  Fix docqa.yaml (or ~/.docqa/config.yaml) and retry."
    )


def warn_cache_only() -> str:
    """No durable store configured, so nothing outlives this process."""
    return (
        "[yellow]⚠[/] No document store configured; running cache-only.\n"
        "  Documents are lost when this command exits.\n"
        "  Use:  --store docqa.db  or set storage.path in docqa.yaml"
    )
