"""Application configuration.

Settings come from keyword arguments, then ``RAGCHAT_*`` environment
variables, then a ``.env`` file in the working directory. The API key is
also accepted as ``OPENAI_API_KEY``.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ragchat.embedding.encoder import DEFAULT_MODEL, DEFAULT_REMOTE_MODEL
from ragchat.generation.client import DEFAULT_API_BASE, DEFAULT_CHAT_MODEL


def _get_default_db_path() -> Path:
    """Get the default database path based on platform and execution context."""
    user_db = Path.home() / "Documents" / "RagChat" / "ragchat.db"

    if getattr(sys, "frozen", False):
        return user_db

    # When running from source, prefer local data/ if it exists
    local_db = Path("data/ragchat.db")
    if local_db.exists():
        return local_db

    return user_db


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RAGCHAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )

    db_path: Path = Field(default_factory=_get_default_db_path)
    embedding_backend: Literal["local", "remote"] = "local"
    model_name: str = DEFAULT_MODEL
    embedding_device: str | None = None
    remote_embedding_model: str = DEFAULT_REMOTE_MODEL
    chat_model: str = DEFAULT_CHAT_MODEL
    api_base: str = DEFAULT_API_BASE
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("RAGCHAT_API_KEY", "OPENAI_API_KEY"),
    )
    request_timeout: float = Field(default=30.0, gt=0)
    chunk_chars: int = Field(default=500, gt=0)
    overlap: int = Field(default=50, ge=0)
    support_email: str = "help@support.com"
    max_history_turns: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _check_overlap(self) -> "AppConfig":
        if self.overlap >= self.chunk_chars:
            raise ValueError(
                f"overlap ({self.overlap}) must be smaller than chunk_chars ({self.chunk_chars})"
            )
        return self

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path
