"""Text ingestion pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

from ragchat.embedding.encoder import EmbeddingGateway
from ragchat.errors import EmbeddingProviderError, EmptyInputError
from ragchat.index.storage import SQLiteVectorStore
from ragchat.ingestion.loader import load_text
from ragchat.models import IngestStats
from ragchat.utils.files import iter_source_paths
from ragchat.utils.text import chunk_text

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class IndexStats:
    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    chunks: int = 0
    processed_files: list[Path] = field(default_factory=list)


class Indexer:
    """Chunks text, embeds every chunk and stores the vectors.

    Ingestion is all-or-nothing: vectors are computed for every chunk before
    anything is written, and the writes share one transaction. If the
    embedding gateway fails on any chunk, nothing from that text is stored.
    """

    def __init__(
        self,
        embedder: EmbeddingGateway,
        store: SQLiteVectorStore,
        *,
        chunk_chars: int = 500,
        overlap: int = 50,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.chunk_chars = chunk_chars
        self.overlap = overlap

    def ingest(self, text: str, metadata: Mapping[str, Any] | None = None) -> IngestStats:
        if not text or not text.strip():
            raise EmptyInputError("Nothing to ingest: text is empty")

        chunks = chunk_text(text, max_chars=self.chunk_chars, overlap=self.overlap)
        items = []
        for chunk in chunks:
            try:
                vector = self.embedder.embed_query(chunk.content)
            except EmbeddingProviderError as exc:
                LOGGER.error("Embedding failed on chunk %d of %d: %s", chunk.index, len(chunks), exc)
                raise
            items.append((vector, chunk.content, {**(metadata or {}), **chunk.metadata}))

        embedding_ids = self.store.insert_many(items)
        LOGGER.info("Ingested %d chunks", len(embedding_ids))
        return IngestStats(chunks=len(chunks), inserted=len(embedding_ids), embedding_ids=embedding_ids)

    def ingest_files(self, paths: Sequence[Path]) -> IndexStats:
        """Ingest every supported file found under the given paths."""
        stats = IndexStats()
        for path in iter_source_paths(paths):
            stats.processed_files.append(path)
            try:
                LOGGER.info("Processing: %s", path)
                text = load_text(path)
                if not text.strip():
                    LOGGER.warning("No text extracted from %s", path)
                    stats.skipped += 1
                    continue
                result = self.ingest(text, metadata={"source": str(path)})
            except Exception as e:
                LOGGER.error("Failed to process %s: %s", path, e)
                stats.failed += 1
                continue
            stats.inserted += 1
            stats.chunks += result.chunks
        return stats
