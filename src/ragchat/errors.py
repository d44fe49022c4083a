"""Exception hierarchy shared by the ingestion and chat flows."""

from __future__ import annotations


class RagChatError(Exception):
    """Base class for all RagChat errors."""


class EmptyInputError(RagChatError, ValueError):
    """Raised when ingest or chat receives blank text."""


class ProviderError(RagChatError):
    """A remote model capability failed or timed out."""


class EmbeddingProviderError(ProviderError):
    pass


class GenerationProviderError(ProviderError):
    pass
