"""Chat-completion gateway backed by an OpenAI-compatible HTTP API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from ragchat.errors import GenerationProviderError

DEFAULT_CHAT_MODEL = "gpt-4.1-nano"
DEFAULT_API_BASE = "https://api.openai.com/v1"

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class GenerationGateway(Protocol):
    def complete(self, prompt: str) -> str: ...


@dataclass(slots=True)
class ChatModelConfig:
    model_name: str = DEFAULT_CHAT_MODEL
    api_base: str = DEFAULT_API_BASE
    api_key: str | None = None
    timeout: float = 30.0
    temperature: float | None = None
    max_tokens: int | None = None


class ChatModel:
    """Send a single-message prompt and return the assistant's reply.

    Timeouts, transport failures, non-2xx responses and malformed payloads
    are all raised as `GenerationProviderError`. Nothing is retried here.
    """

    def __init__(
        self,
        config: ChatModelConfig | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config or ChatModelConfig()
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

    def _payload(self, prompt: str) -> dict:
        payload: dict = {
            "model": self.config.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
        }
        if self.config.temperature is not None:
            payload["temperature"] = self.config.temperature
        if self.config.max_tokens is not None:
            payload["max_tokens"] = self.config.max_tokens
        return payload

    def complete(self, prompt: str) -> str:
        LOGGER.debug("Calling %s with a %d-char prompt", self.config.model_name, len(prompt))
        try:
            response = self._client.post("/chat/completions", json=self._payload(prompt))
            response.raise_for_status()
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except httpx.TimeoutException as exc:
            raise GenerationProviderError("Chat completion timed out") from exc
        except httpx.HTTPError as exc:
            raise GenerationProviderError(f"Chat completion failed: {exc}") from exc
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise GenerationProviderError(f"Malformed chat completion response: {exc}") from exc

        if content is None:
            raise GenerationProviderError("Chat completion returned no content")
        return str(content).strip()
