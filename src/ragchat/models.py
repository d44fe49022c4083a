"""Core RagChat data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np


@dataclass(slots=True, frozen=True)
class TextChunk:
    """Bounded slice of source text prepared for embedding."""

    content: str
    index: int
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class IndexedDocument:
    """A stored chunk together with its embedding identifier."""

    id: int
    embedding_id: str
    text: str
    metadata: Dict[str, Any]
    embedding: np.ndarray | None = None


@dataclass(slots=True)
class SearchMatch:
    document: IndexedDocument
    score: float


@dataclass(slots=True)
class ConversationTurn:
    question: str
    answer: str


@dataclass(slots=True)
class IngestStats:
    """Outcome of a single text ingestion."""

    chunks: int = 0
    inserted: int = 0
    embedding_ids: List[str] = field(default_factory=list)
