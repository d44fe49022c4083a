"""RAG orchestration: ingest, chat and clear."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from ragchat.chat.memory import ConversationMemory
from ragchat.chat.prompts import DEFAULT_SUPPORT_EMAIL, NO_CONTEXT_MESSAGE, compose_prompt, render_history
from ragchat.chat.rewriter import QueryRewriter
from ragchat.config import AppConfig
from ragchat.embedding.encoder import (
    EmbeddingConfig,
    EmbeddingGateway,
    EmbeddingModel,
    RemoteEmbeddingConfig,
    RemoteEmbeddingModel,
)
from ragchat.errors import EmptyInputError, GenerationProviderError
from ragchat.generation.client import ChatModel, ChatModelConfig, GenerationGateway
from ragchat.index.indexer import Indexer
from ragchat.index.search import Retriever
from ragchat.index.storage import SQLiteVectorStore
from ragchat.models import IngestStats

LOGGER = logging.getLogger(__name__)


class ChatBotService:
    """Glue between the chunker, embedder, vector store, memory and chat model.

    Each call is independent; the only state shared between requests is the
    conversation memory and the vector store, both of which are thread-safe.
    """

    def __init__(
        self,
        embedder: EmbeddingGateway,
        store: SQLiteVectorStore,
        generator: GenerationGateway,
        *,
        memory: ConversationMemory | None = None,
        chunk_chars: int = 500,
        overlap: int = 50,
        support_email: str = DEFAULT_SUPPORT_EMAIL,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.generator = generator
        self.memory = memory if memory is not None else ConversationMemory()
        self.support_email = support_email
        self.indexer = Indexer(embedder, store, chunk_chars=chunk_chars, overlap=overlap)
        self.retriever = Retriever(embedder, store)
        self.rewriter = QueryRewriter(generator)

    def ingest(self, text: str, metadata: Mapping[str, Any] | None = None) -> IngestStats:
        return self.indexer.ingest(text, metadata)

    def chat(self, message: str) -> str:
        if not message or not message.strip():
            raise EmptyInputError("Please enter a question")

        try:
            standalone = self.rewriter.rewrite(message)
        except GenerationProviderError as exc:
            LOGGER.warning("Query rewrite failed, using the original question: %s", exc)
            standalone = message

        context = self.retriever.retrieve(standalone)
        if context is None:
            return NO_CONTEXT_MESSAGE

        history = render_history(self.memory.turns())
        prompt = compose_prompt(message, context, history, support_email=self.support_email)
        answer = self.generator.complete(prompt)
        self.memory.record(message, answer)
        return answer

    def clear_all(self) -> int:
        removed = self.store.remove_all()
        LOGGER.info("Removed %d stored embeddings", removed)
        return removed

    def reset_memory(self) -> None:
        self.memory.clear()

    def close(self) -> None:
        for resource in (self.embedder, self.generator):
            close = getattr(resource, "close", None)
            if callable(close):
                close()
        self.store.close()


def build_embedder(config: AppConfig) -> EmbeddingGateway:
    if config.embedding_backend == "remote":
        return RemoteEmbeddingModel(
            RemoteEmbeddingConfig(
                model_name=config.remote_embedding_model,
                api_base=config.api_base,
                api_key=config.api_key,
                timeout=config.request_timeout,
            )
        )
    return EmbeddingModel(
        EmbeddingConfig(model_name=config.model_name, device=config.embedding_device)
    )


def build_service(config: AppConfig, *, base_dir: Path | None = None) -> ChatBotService:
    """Wire a `ChatBotService` from configuration."""
    resolved_db = config.resolve_db_path(base_dir)
    resolved_db.parent.mkdir(parents=True, exist_ok=True)

    embedder = build_embedder(config)
    store = SQLiteVectorStore(resolved_db, dimension=embedder.dimension)
    generator = ChatModel(
        ChatModelConfig(
            model_name=config.chat_model,
            api_base=config.api_base,
            api_key=config.api_key,
            timeout=config.request_timeout,
        )
    )
    return ChatBotService(
        embedder,
        store,
        generator,
        memory=ConversationMemory(max_turns=config.max_history_turns),
        chunk_chars=config.chunk_chars,
        overlap=config.overlap,
        support_email=config.support_email,
    )
