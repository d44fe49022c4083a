"""Embedding model management."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence, runtime_checkable

import httpx
import numpy as np
from sentence_transformers import SentenceTransformer

from ragchat.errors import EmbeddingProviderError

DEFAULT_MODEL = "sentence-transformers/all-mpnet-base-v2"
DEFAULT_REMOTE_MODEL = "text-embedding-3-small"

REMOTE_MODEL_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

logger = logging.getLogger(__name__)


@runtime_checkable
class EmbeddingGateway(Protocol):
    """Anything that turns text into fixed-dimension vectors."""

    dimension: int

    def embed(self, texts: Sequence[str] | Iterable[str]) -> np.ndarray: ...

    def embed_query(self, text: str) -> np.ndarray: ...


@dataclass(slots=True)
class EmbeddingConfig:
    model_name: str = DEFAULT_MODEL
    batch_size: int = 16
    normalize: bool = True
    device: str | None = None


class EmbeddingModel:
    """Thin wrapper around `SentenceTransformer` for query and document embeddings.

    Encoding failures surface as `EmbeddingProviderError`.
    """

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self.config = config or EmbeddingConfig()
        self._model = SentenceTransformer(self.config.model_name, device=self.config.device)
        logger.info("Loaded embedding model %s on device %s", self.config.model_name, self._model.device)
        self.dimension = int(self._model.get_sentence_embedding_dimension())

    def embed(self, texts: Sequence[str] | Iterable[str]) -> np.ndarray:
        """Return float32 embeddings for input texts."""
        sentences = list(texts)
        try:
            embeddings = self._model.encode(
                sentences,
                batch_size=self.config.batch_size,
                show_progress_bar=False,
                convert_to_numpy=True,
                normalize_embeddings=self.config.normalize,
            )
        except Exception as exc:
            raise EmbeddingProviderError(f"Local embedding failed: {exc}") from exc
        return embeddings.astype("float32", copy=False)

    def embed_query(self, text: str) -> np.ndarray:
        """Convenience wrapper for single-query embedding."""
        return self.embed([text])[0]


@dataclass(slots=True)
class RemoteEmbeddingConfig:
    model_name: str = DEFAULT_REMOTE_MODEL
    api_base: str = "https://api.openai.com/v1"
    api_key: str | None = None
    timeout: float = 30.0
    dimension: int | None = None


class RemoteEmbeddingModel:
    """Client for an OpenAI-compatible ``/embeddings`` endpoint."""

    def __init__(
        self,
        config: RemoteEmbeddingConfig | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config or RemoteEmbeddingConfig()
        self.dimension = self.config.dimension or REMOTE_MODEL_DIMENSIONS.get(
            self.config.model_name, 1536
        )
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        self._client = client or httpx.Client(
            base_url=self.config.api_base.rstrip("/"),
            timeout=httpx.Timeout(self.config.timeout),
            headers=headers,
        )

    def close(self) -> None:
        self._client.close()

    def embed(self, texts: Sequence[str] | Iterable[str]) -> np.ndarray:
        """Return float32 embeddings for input texts, in input order."""
        inputs = list(texts)
        if not inputs:
            return np.zeros((0, self.dimension), dtype="float32")

        logger.debug("Requesting %d embeddings from %s", len(inputs), self.config.model_name)
        try:
            response = self._client.post(
                "/embeddings",
                json={"model": self.config.model_name, "input": inputs},
            )
            response.raise_for_status()
            data = sorted(response.json()["data"], key=lambda item: item["index"])
            vectors = np.asarray([item["embedding"] for item in data], dtype="float32")
        except httpx.TimeoutException as exc:
            raise EmbeddingProviderError("Embedding request timed out") from exc
        except httpx.HTTPError as exc:
            raise EmbeddingProviderError(f"Embedding request failed: {exc}") from exc
        except (KeyError, TypeError, ValueError) as exc:
            raise EmbeddingProviderError(f"Malformed embedding response: {exc}") from exc

        if vectors.shape != (len(inputs), self.dimension):
            raise EmbeddingProviderError(
                f"Expected embeddings of shape {(len(inputs), self.dimension)}, got {vectors.shape}"
            )
        return vectors

    def embed_query(self, text: str) -> np.ndarray:
        return self.embed([text])[0]
