"""Text helpers including fixed-window character chunking."""

from __future__ import annotations

from typing import Iterable, List

from ragchat.models import TextChunk


def chunk_text(text: str, *, max_chars: int = 500, overlap: int = 50) -> List[TextChunk]:
    """Split text into overlapping character windows.

    Consecutive windows share exactly ``overlap`` characters. Chunking stops
    as soon as a window reaches the end of the text, so the final chunk may be
    shorter than ``max_chars`` but is never a suffix of the previous one.
    Offsets of each window are kept in the chunk metadata.
    """
    if max_chars <= 0:
        raise ValueError("max_chars must be positive")
    if overlap < 0 or overlap >= max_chars:
        raise ValueError("overlap must be in [0, max_chars)")
    if not text:
        return []

    step = max_chars - overlap
    chunks: List[TextChunk] = []
    start = 0
    while True:
        end = min(start + max_chars, len(text))
        chunks.append(
            TextChunk(
                content=text[start:end],
                index=len(chunks),
                metadata={"start": start, "end": end},
            )
        )
        if end >= len(text):
            break
        start += step
    return chunks


def normalize_whitespace(lines: Iterable[str]) -> str:
    """Collapse whitespace and join lines."""
    return "\n".join(line.strip() for line in lines if line.strip())
