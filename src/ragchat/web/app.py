"""FastAPI application exposing ingest, chat and clear."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ragchat.chat.service import ChatBotService, build_service
from ragchat.config import AppConfig
from ragchat.errors import EmptyInputError, ProviderError

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="RagChat", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_service: ChatBotService | None = None
_service_lock = threading.Lock()


class EmbedPayload(BaseModel):
    text: str


class ChatPayload(BaseModel):
    message: str


def get_service() -> ChatBotService:
    """Return the process-wide service, building it on first use."""
    global _service
    with _service_lock:
        if _service is None:
            _service = build_service(AppConfig())
        return _service


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    global _service
    with _service_lock:
        if _service is not None:
            _service.close()
            _service = None


@app.get("/health")
async def health(service: ChatBotService = Depends(get_service)) -> dict[str, Any]:
    stats = await asyncio.to_thread(service.store.get_stats)
    return {"status": "ok", **stats, "memory_turns": len(service.memory)}


@app.post("/embed")
async def embed_text(
    payload: EmbedPayload, service: ChatBotService = Depends(get_service)
) -> dict[str, Any]:
    try:
        stats = await asyncio.to_thread(service.ingest, payload.text)
    except EmptyInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ProviderError as exc:
        LOGGER.error("Ingestion failed: %s", exc)
        raise HTTPException(
            status_code=502, detail="Embedding service unavailable, please try again."
        ) from exc
    return {"status": "ok", "chunks": stats.chunks, "inserted": stats.inserted}


@app.post("/chat")
async def chat(
    payload: ChatPayload, service: ChatBotService = Depends(get_service)
) -> dict[str, str]:
    try:
        answer = await asyncio.to_thread(service.chat, payload.message)
    except EmptyInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ProviderError as exc:
        LOGGER.error("Chat failed: %s", exc)
        raise HTTPException(
            status_code=502, detail="Something went wrong, please try again."
        ) from exc
    return {"answer": answer}


@app.delete("/embeddings")
async def clear_embeddings(service: ChatBotService = Depends(get_service)) -> dict[str, Any]:
    removed = await asyncio.to_thread(service.clear_all)
    return {"status": "ok", "removed": removed}


@app.delete("/memory")
async def clear_memory(service: ChatBotService = Depends(get_service)) -> dict[str, str]:
    service.reset_memory()
    return {"status": "ok"}
