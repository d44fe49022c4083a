"""Standalone-question rewriting."""

from __future__ import annotations

import logging

from ragchat.chat.prompts import standalone_prompt
from ragchat.generation.client import GenerationGateway

LOGGER = logging.getLogger(__name__)


class QueryRewriter:
    """Ask the generation model to make a question self-contained.

    `GenerationProviderError` is not caught here; the caller decides
    whether to fall back to the raw question.
    """

    def __init__(self, generator: GenerationGateway) -> None:
        self.generator = generator

    def rewrite(self, question: str) -> str:
        rewritten = self.generator.complete(standalone_prompt(question)).strip()
        if not rewritten:
            LOGGER.debug("Rewriter returned nothing; keeping the original question")
            return question
        LOGGER.debug("Rewrote %r as %r", question, rewritten)
        return rewritten
