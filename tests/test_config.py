"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from menu_ingest.config import Settings


def test_settings_defaults_and_environment(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "env-key")
    monkeypatch.setenv("CHUNK_MAX_TOKENS", "900")

    settings = Settings()

    assert settings.openai_api_key == "env-key"
    assert settings.chunk_max_tokens == 900
    assert settings.chars_per_token == 4
    assert settings.enhancement_delay_seconds == 2.0


def test_settings_reject_invalid_budget() -> None:
    with pytest.raises(ValidationError):
        Settings(openai_api_key="openai-key", chunk_max_tokens=0)
