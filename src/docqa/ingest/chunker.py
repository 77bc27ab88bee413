"""Fixed-window text chunker with overlap and word-boundary snapping.

Text is normalized first (whitespace runs collapsed to one space, ends
trimmed). A window of ``chunk_size`` characters then slides over it:

- a window that does not reach the end of the text is shortened to the
  last space at or before its tentative end, provided that space lies
  after the window start;
- the next window starts ``overlap`` characters before the previous end,
  or at the end itself when that would not move the cursor forward.
"""

from __future__ import annotations

import re

from docqa.store.models import Chunk

_WHITESPACE_RE = re.compile(r"\s+")

DEFAULT_CHUNK_SIZE = 600
DEFAULT_OVERLAP = 100


def normalize(text: str) -> str:
    """Collapse every whitespace run to a single space and trim the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


class Chunker:
    """Split document text into overlapping, word-aligned chunks.

    Args:
        chunk_size: Target window length in characters.
        overlap: Characters shared between consecutive windows.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_OVERLAP) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if not 0 <= overlap < chunk_size:
            raise ValueError("overlap must be in [0, chunk_size)")
        self.chunk_size = chunk_size
        self.overlap = overlap

    def split(self, text: str) -> list[Chunk]:
        """Return the ordered chunks of *text* (empty for blank input)."""
        normalized = normalize(text)
        chunks: list[Chunk] = []
        for start, end in self.windows(normalized):
            segment = normalized[start:end].strip()
            if segment:
                chunks.append(Chunk(text=segment, index=len(chunks)))
        return chunks

    def windows(self, normalized: str) -> list[tuple[int, int]]:
        """Return the ``(start, end)`` slice boundaries over already-normalized text."""
        length = len(normalized)
        bounds: list[tuple[int, int]] = []
        start = 0

        while start < length:
            end = min(start + self.chunk_size, length)
            if end < length:
                last_space = normalized.rfind(" ", 0, end + 1)
                if last_space > start:
                    end = last_space
            bounds.append((start, end))

            next_start = end - self.overlap if end < length else end
            # A snapped window can end close enough to its start that
            # stepping back by the overlap would revisit it.
            if next_start <= start:
                next_start = end
            start = next_start

        return bounds
