"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_chat_model: str = "gpt-4o"
    openai_reasoning_model: str = "o4-mini"
    openai_reasoning_effort: str | None = "medium"
    openai_transcription_model: str = "gpt-4o-mini-transcribe"
    ai_timeout_seconds: float = 30.0
    ai_temperature: float = 0.7
    ai_max_tokens: int = 1000
    ai_top_p: float = 1.0
    ai_frequency_penalty: float = 0.0
    ai_presence_penalty: float = 0.0
    context_window_size: int = 10
    timezone: str = "UTC"
    log_level: str = "INFO"
    storage_backend: Literal["memory", "supabase"] = "memory"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_table: str = "key_value_store"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
