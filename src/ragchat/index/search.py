"""Semantic retrieval interface."""

from __future__ import annotations

import logging
from typing import List, Optional

from ragchat.embedding.encoder import EmbeddingGateway
from ragchat.index.storage import SQLiteVectorStore
from ragchat.models import SearchMatch

LOGGER = logging.getLogger(__name__)


class Retriever:
    """High-level API to query the vector store."""

    def __init__(self, embedder: EmbeddingGateway, store: SQLiteVectorStore) -> None:
        self.embedder = embedder
        self.store = store

    def search(self, query: str, *, top_k: int = 10) -> List[SearchMatch]:
        embedding = self.embedder.embed_query(query)
        return self.store.search(embedding, top_k=top_k)

    def retrieve(self, question: str) -> Optional[str]:
        """Return the text of the single best match, or None if nothing is stored.

        No minimum score is applied; a weak match is still returned.
        """
        matches = self.search(question, top_k=1)
        if not matches:
            LOGGER.info("No stored context matched the query")
            return None
        best = matches[0]
        LOGGER.debug("Best match %s (score %.4f)", best.document.embedding_id, best.score)
        return best.document.text
