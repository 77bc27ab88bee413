"""Logging setup for the docqa CLI.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed once here, by the CLI entry point.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_NOISY_LOGGERS = ("LiteLLM", "litellm", "httpx", "httpcore", "openai", "pypdf")


def configure_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Route log records through rich on stderr.

    WARNING and above by default; DEBUG for docqa itself when *verbose*.
    Third-party loggers stay at WARNING either way.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("docqa").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
