"""Tests for the FastAPI web application."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

import ragchat.web.app as web_module
from ragchat.chat.prompts import NO_CONTEXT_MESSAGE
from ragchat.chat.service import ChatBotService
from ragchat.errors import EmbeddingProviderError, GenerationProviderError
from ragchat.web.app import app, get_service


@pytest.fixture
def client(service: ChatBotService):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def failing_client():
    mock_service = MagicMock()
    app.dependency_overrides[get_service] = lambda: mock_service
    yield TestClient(app), mock_service
    app.dependency_overrides.clear()


class TestHealth:
    def test_health_empty(self, client: TestClient) -> None:
        assert client.get("/health").json() == {
            "status": "ok",
            "embedding_count": 0,
            "total_chars": 0,
            "dimension": 64,
            "memory_turns": 0,
        }

    def test_health_reports_stored_text(
        self, client: TestClient, service: ChatBotService
    ) -> None:
        client.post("/embed", json={"text": "abcde"})
        service.memory.record("q", "a")

        body = client.get("/health").json()

        assert body["embedding_count"] == 1
        assert body["total_chars"] == 5
        assert body["memory_turns"] == 1


class TestEmbedEndpoint:
    """Tests for POST /embed."""

    def test_embed_success(self, client: TestClient, store) -> None:
        response = client.post("/embed", json={"text": "y" * 700})

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "chunks": 2, "inserted": 2}
        assert store.count() == 2

    def test_embed_blank_text(self, client: TestClient) -> None:
        response = client.post("/embed", json={"text": "   "})

        assert response.status_code == 400

    def test_embed_missing_field(self, client: TestClient) -> None:
        assert client.post("/embed", json={}).status_code == 422

    def test_embed_provider_error(self, failing_client) -> None:
        client, service = failing_client
        service.ingest.side_effect = EmbeddingProviderError("down")

        response = client.post("/embed", json={"text": "hello"})

        assert response.status_code == 502
        assert "try again" in response.json()["detail"]


class TestChatEndpoint:
    """Tests for POST /chat."""

    def test_chat_without_context(self, client: TestClient) -> None:
        response = client.post("/chat", json={"message": "anyone there?"})

        assert response.status_code == 200
        assert response.json() == {"answer": NO_CONTEXT_MESSAGE}

    def test_chat_with_context(self, client: TestClient, chat_model) -> None:
        client.post("/embed", json={"text": "The cafeteria serves lunch at noon."})
        chat_model.answers = ["Lunch is at noon."]

        response = client.post("/chat", json={"message": "When is lunch served?"})

        assert response.status_code == 200
        assert response.json() == {"answer": "Lunch is at noon."}

    def test_chat_blank_message(self, client: TestClient) -> None:
        assert client.post("/chat", json={"message": ""}).status_code == 400

    def test_chat_provider_error(self, failing_client) -> None:
        client, service = failing_client
        service.chat.side_effect = GenerationProviderError("quota")

        response = client.post("/chat", json={"message": "hi"})

        assert response.status_code == 502
        assert response.json()["detail"] == "Something went wrong, please try again."


class TestClearEndpoints:
    def test_clear_embeddings(self, client: TestClient, store) -> None:
        client.post("/embed", json={"text": "to be removed"})

        response = client.delete("/embeddings")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "removed": 1}
        assert store.count() == 0

    def test_chat_after_clear_has_no_context(self, client: TestClient) -> None:
        client.post("/embed", json={"text": "The cafeteria serves lunch at noon."})
        client.delete("/embeddings")

        response = client.post("/chat", json={"message": "When is lunch served?"})

        assert response.json() == {"answer": NO_CONTEXT_MESSAGE}

    def test_clear_memory(self, client: TestClient, service: ChatBotService) -> None:
        service.memory.record("q", "a")

        response = client.delete("/memory")

        assert response.status_code == 200
        assert len(service.memory) == 0


class TestGetService:
    def test_builds_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(web_module, "_service", None)
        sentinel = MagicMock()
        with patch("ragchat.web.app.build_service", return_value=sentinel) as mock_build:
            assert get_service() is sentinel
            assert get_service() is sentinel

        mock_build.assert_called_once()
