"""Tests for the retrieval interface."""

from __future__ import annotations

from unittest.mock import MagicMock

import numpy as np
import pytest

from ragchat.errors import EmbeddingProviderError
from ragchat.index.search import Retriever
from ragchat.models import IndexedDocument, SearchMatch


def _match(text: str, score: float, row_id: int = 1) -> SearchMatch:
    return SearchMatch(
        document=IndexedDocument(id=row_id, embedding_id=f"e{row_id}", text=text, metadata={}),
        score=score,
    )


class TestRetriever:
    """Test Retriever class."""

    def test_search_passes_top_k(self) -> None:
        """Should embed the query and forward top_k to the store."""
        mock_embedder = MagicMock()
        mock_embedder.embed_query.return_value = np.array([0.1, 0.2, 0.3])
        mock_store = MagicMock()
        mock_store.search.return_value = []

        retriever = Retriever(mock_embedder, mock_store)
        retriever.search("query", top_k=25)

        mock_embedder.embed_query.assert_called_once_with("query")
        assert mock_store.search.call_args[1]["top_k"] == 25

    def test_retrieve_returns_best_text(self) -> None:
        mock_embedder = MagicMock()
        mock_embedder.embed_query.return_value = np.array([1.0])
        mock_store = MagicMock()
        mock_store.search.return_value = [_match("best chunk", 0.9)]

        retriever = Retriever(mock_embedder, mock_store)

        assert retriever.retrieve("what?") == "best chunk"
        assert mock_store.search.call_args[1]["top_k"] == 1

    def test_retrieve_empty_store(self) -> None:
        """Should return None when nothing matches."""
        mock_embedder = MagicMock()
        mock_embedder.embed_query.return_value = np.array([1.0])
        mock_store = MagicMock()
        mock_store.search.return_value = []

        assert Retriever(mock_embedder, mock_store).retrieve("anything") is None

    def test_retrieve_propagates_embedding_errors(self) -> None:
        mock_embedder = MagicMock()
        mock_embedder.embed_query.side_effect = EmbeddingProviderError("down")
        mock_store = MagicMock()

        with pytest.raises(EmbeddingProviderError):
            Retriever(mock_embedder, mock_store).retrieve("anything")
        mock_store.search.assert_not_called()

    def test_retrieve_against_real_store(self, embedder, store) -> None:
        """A distinctive phrase is found again by a query sharing its words."""
        store.insert(embedder.embed_query("bananas are yellow fruit"), "bananas are yellow fruit")
        store.insert(embedder.embed_query("the ocean is deep and blue"), "the ocean is deep and blue")

        retriever = Retriever(embedder, store)

        assert retriever.retrieve("how deep is the ocean") == "the ocean is deep and blue"
