"""Shared fixtures: deterministic stand-ins for the model gateways."""

from __future__ import annotations

import re
import zlib
from typing import Callable, Iterable, List, Sequence

import numpy as np
import pytest

from ragchat.chat.memory import ConversationMemory
from ragchat.chat.service import ChatBotService
from ragchat.errors import EmbeddingProviderError, GenerationProviderError
from ragchat.index.storage import SQLiteVectorStore

DIMENSION = 64
_WORD = re.compile(r"[a-z0-9]+")


class HashingEmbedder:
    """Bag-of-words embedder: texts sharing words get similar vectors."""

    def __init__(self, dimension: int = DIMENSION) -> None:
        self.dimension = dimension
        self.calls: List[str] = []
        self.fail_on: Callable[[str], bool] | None = None

    def embed(self, texts: Sequence[str] | Iterable[str]) -> np.ndarray:
        return np.vstack([self.embed_query(text) for text in texts])

    def embed_query(self, text: str) -> np.ndarray:
        self.calls.append(text)
        if self.fail_on is not None and self.fail_on(text):
            raise EmbeddingProviderError("embedding backend down")
        vector = np.zeros(self.dimension, dtype="float32")
        for word in _WORD.findall(text.lower()):
            vector[zlib.crc32(word.encode()) % self.dimension] += 1.0
        norm = np.linalg.norm(vector)
        return vector / norm if norm else vector


class ScriptedChatModel:
    """Echoes rewrite requests and answers from a queue."""

    def __init__(self, answers: Iterable[str] = ()) -> None:
        self.answers = list(answers)
        self.prompts: List[str] = []
        self.fail_rewrite = False
        self.fail_answer = False

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if prompt.startswith("Given a question"):
            if self.fail_rewrite:
                raise GenerationProviderError("rewrite unavailable")
            question = prompt.split("question:", 1)[1].rsplit("standalone question:", 1)[0]
            return question.strip()
        if self.fail_answer:
            raise GenerationProviderError("generation unavailable")
        if self.answers:
            return self.answers.pop(0)
        return f"answer {len(self.prompts)}"

    @property
    def answer_prompts(self) -> List[str]:
        return [p for p in self.prompts if not p.startswith("Given a question")]


@pytest.fixture
def embedder() -> HashingEmbedder:
    return HashingEmbedder()


@pytest.fixture
def chat_model() -> ScriptedChatModel:
    return ScriptedChatModel()


@pytest.fixture
def store(tmp_path):
    store = SQLiteVectorStore(tmp_path / "test.db", dimension=DIMENSION)
    yield store
    store.close()


@pytest.fixture
def service(embedder, store, chat_model) -> ChatBotService:
    return ChatBotService(embedder, store, chat_model, memory=ConversationMemory())
