"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-4.1-mini"
    openai_base_url: str | None = None
    openai_temperature: float | None = 0.1
    request_timeout_seconds: float = Field(default=60.0, gt=0)
    chunk_max_tokens: int = Field(default=625, ge=1)
    chars_per_token: int = Field(default=4, ge=1)
    chunk_delay_seconds: float = Field(default=1.0, ge=0)
    extraction_retry_delay_seconds: float = Field(default=2.0, ge=0)
    enhancement_delay_seconds: float = Field(default=2.0, ge=0)
    min_text_chars: int = Field(default=10, ge=0)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
