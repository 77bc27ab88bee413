"""Text extraction for uploaded files: PDF via pypdf, text types via UTF-8 decode."""

from __future__ import annotations

import io
from pathlib import PurePath

import pypdf
from pypdf.errors import PdfReadError


class UploadValidationError(ValueError):
    """An upload the user must fix: missing, unsupported, oversize, or empty."""


class UnsupportedTypeError(UploadValidationError):
    """File type is neither PDF nor a supported text format."""


class UnreadableContentError(UploadValidationError):
    """File claims a supported type but its content cannot be read (corrupt, encrypted)."""


PDF_TYPES = {"application/pdf"}
TEXT_TYPES = {"text/plain", "text/markdown", "text/csv", "text/x-rst", "text/x-log"}

_PDF_EXTS = {".pdf"}
_TEXT_EXTS = {".txt", ".text", ".md", ".markdown", ".csv", ".log", ".rst"}


def detect_kind(filename: str, content_type: str | None = None) -> str:
    """Return ``"pdf"``, ``"text"`` or ``"unknown"`` from MIME type or extension.

    A declared MIME type wins over the extension.
    """
    if content_type:
        mime = content_type.split(";")[0].strip().lower()
        if mime in PDF_TYPES:
            return "pdf"
        if mime in TEXT_TYPES:
            return "text"
    ext = PurePath(filename).suffix.lower()
    if ext in _PDF_EXTS:
        return "pdf"
    if ext in _TEXT_EXTS:
        return "text"
    return "unknown"


def extract_text(data: bytes, filename: str, content_type: str | None = None) -> str:
    """Extract plain text from *data*.

    Raises:
        UnsupportedTypeError: The file type is not PDF or text.
        UnreadableContentError: The PDF cannot be parsed or is encrypted.
    """
    kind = detect_kind(filename, content_type)
    if kind == "pdf":
        return _extract_pdf(data)
    if kind == "text":
        return data.decode("utf-8", errors="replace")
    ext = PurePath(filename).suffix or content_type or "unknown"
    raise UnsupportedTypeError(f"Unsupported file type {ext!r}: only PDF and text files are supported")


def _extract_pdf(data: bytes) -> str:
    """Concatenate page text; pages without text (scans) are skipped."""
    try:
        reader = pypdf.PdfReader(io.BytesIO(data))
    except (PdfReadError, ValueError, KeyError, OSError) as exc:
        raise UnreadableContentError(f"Could not read PDF: {exc}") from exc

    if reader.is_encrypted:
        raise UnreadableContentError("PDF is encrypted and cannot be read")

    parts: list[str] = []
    try:
        for page in reader.pages:
            stripped = (page.extract_text() or "").strip()
            if stripped:
                parts.append(stripped)
    except (PdfReadError, ValueError, KeyError, OSError) as exc:
        raise UnreadableContentError(f"Could not read PDF: {exc}") from exc
    return "\n\n".join(parts)
