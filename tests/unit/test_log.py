"""Tests for CLI logging setup."""

from __future__ import annotations

import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from docqa.log import configure_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    docqa_level = logging.getLogger("docqa").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("docqa").setLevel(docqa_level)


def test_installs_single_rich_handler():
    configure_logging()
    configure_logging()
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], RichHandler)


def test_default_level_is_warning():
    configure_logging()
    assert logging.getLogger("docqa").level == logging.WARNING
    assert logging.getLogger("litellm").level == logging.WARNING


def test_verbose_enables_debug_for_docqa_only():
    configure_logging(verbose=True)
    assert logging.getLogger("docqa").level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


def test_records_reach_console():
    buf = io.StringIO()
    configure_logging(console=Console(file=buf, width=200))
    logging.getLogger("docqa.store.documents").warning("Durable write failed for document d1")
    assert "docqa.store.documents: Durable write failed for document d1" in buf.getvalue()
