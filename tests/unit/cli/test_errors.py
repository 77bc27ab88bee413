"""Tests for CLI error messages: each names the cause and the fix."""

from __future__ import annotations

from docqa.cli.errors import (
    err_chat_not_found,
    err_document_not_found,
    err_file_not_found,
    err_invalid_config,
    err_no_api_key,
    err_owner_required,
    err_upload_rejected,
    warn_cache_only,
)


def test_no_api_key_names_env_var():
    msg = err_no_api_key("openai/gpt-4o-mini")
    assert "'openai'" in msg
    assert "export OPENAI_API_KEY=" in msg


def test_no_api_key_bare_model_is_openai():
    assert "OPENAI_API_KEY" in err_no_api_key("gpt-4o-mini")


def test_no_api_key_other_provider():
    assert "ANTHROPIC_API_KEY" in err_no_api_key("anthropic/claude-3-5-haiku")


def test_upload_rejected_includes_reason():
    msg = err_upload_rejected("scan.pdf", "No text could be extracted from 'scan.pdf'")
    assert "scan.pdf" in msg
    assert "No text could be extracted" in msg


def test_markup_in_user_values_escaped():
    msg = err_upload_rejected("[bold]x.pdf", "bad [red]reason")
    assert "\\[bold]x.pdf" in msg
    assert "\\[red]reason" in msg


def test_file_not_found_suggests_upload():
    assert "docqa upload" in err_file_not_found("missing.pdf")


def test_document_not_found_suggests_list():
    msg = err_document_not_found("abc")
    assert "abc" in msg
    assert "docqa list" in msg


def test_chat_not_found_suggests_list():
    assert "docqa chats list" in err_chat_not_found("c1")


def test_owner_required_names_flag_and_env():
    msg = err_owner_required("save chats")
    assert "save chats" in msg
    assert "--owner" in msg
    assert "DOCQA_OWNER" in msg


def test_invalid_config_includes_detail():
    assert "chunking.overlap" in err_invalid_config("chunking.overlap (600) must be smaller")


def test_cache_only_warning_suggests_store():
    msg = warn_cache_only()
    assert "cache-only" in msg
    assert "--store" in msg
