"""Tests for QueryRewriter."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from ragchat.chat.rewriter import QueryRewriter
from ragchat.errors import GenerationProviderError


class TestQueryRewriter:
    def test_sends_standalone_template(self) -> None:
        generator = MagicMock()
        generator.complete.return_value = "  What is the refund policy?  "

        result = QueryRewriter(generator).rewrite("and refunds?")

        assert result == "What is the refund policy?"
        prompt = generator.complete.call_args[0][0]
        assert "question: and refunds?" in prompt
        assert prompt.startswith("Given a question")

    def test_blank_reply_keeps_original(self) -> None:
        generator = MagicMock()
        generator.complete.return_value = "   "

        assert QueryRewriter(generator).rewrite("original") == "original"

    def test_errors_propagate(self) -> None:
        generator = MagicMock()
        generator.complete.side_effect = GenerationProviderError("quota")

        with pytest.raises(GenerationProviderError):
            QueryRewriter(generator).rewrite("anything")
