"""docqa ingest pipeline: text extraction, chunking, upload handling."""

from docqa.ingest.chunker import Chunker, normalize
from docqa.ingest.extract import (
    UnreadableContentError,
    UnsupportedTypeError,
    UploadValidationError,
    extract_text,
)
from docqa.ingest.upload import UploadResult, ingest_upload

__all__ = [
    "Chunker",
    "UnreadableContentError",
    "UnsupportedTypeError",
    "UploadResult",
    "UploadValidationError",
    "extract_text",
    "ingest_upload",
    "normalize",
]
