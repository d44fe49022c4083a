"""Utility helpers for working with files."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

SUPPORTED_SUFFIXES = frozenset({".txt", ".md", ".pdf"})


def iter_source_paths(
    inputs: Iterable[Path], suffixes: Iterable[str] = SUPPORTED_SUFFIXES
) -> Iterator[Path]:
    """Yield ingestible file paths from input paths, descending into directories."""
    allowed = {suffix.lower() for suffix in suffixes}
    for item in inputs:
        if item.is_dir():
            children = sorted(
                child for child in item.rglob("*") if child.is_file() and child.suffix.lower() in allowed
            )
            yield from children
        elif item.is_file() and item.suffix.lower() in allowed:
            yield item
