"""Load plain text from files prior to ingestion.

PDF text is extracted with PyMuPDF (fitz); everything else is read as UTF-8.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import fitz  # PyMuPDF

from ragchat.utils.text import normalize_whitespace

LOGGER = logging.getLogger(__name__)


def iter_pdf_pages(path: Path) -> Iterator[str]:
    """Yield normalized text from a PDF file page by page."""
    doc = fitz.open(path)
    try:
        for index in range(len(doc)):
            try:
                text = doc[index].get_text() or ""
            except Exception as exc:  # pragma: no cover - defensive path
                LOGGER.warning("Failed to read page %s in %s: %s", index, path, exc)
                continue
            normalized = normalize_whitespace(text.splitlines())
            if normalized:
                yield normalized
    finally:
        doc.close()


def load_text(path: Path) -> str:
    """Return the textual content of ``path``."""
    if path.suffix.lower() == ".pdf":
        return "\n".join(iter_pdf_pages(path))
    return path.read_text(encoding="utf-8", errors="replace")
