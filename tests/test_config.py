"""Tests for settings and upstream configuration."""

import pytest

from diet_journal.config import Settings, UpstreamConfig
from diet_journal.errors import ConfigurationError


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "service-key")
    monkeypatch.setenv("AI_BASE_URL", "https://llm.example.com/v1/chat/completions")
    monkeypatch.setenv("MODEL_NAME", "env-model")
    monkeypatch.setenv("API_KEY", "env-key")
    monkeypatch.setenv("AI_TIMEOUT_SECONDS", "30")

    settings = Settings(_env_file=None)

    assert settings.supabase_url == "https://env.supabase.co"
    assert settings.model_name == "env-model"
    assert settings.ai_timeout_seconds == 30.0
    assert settings.region_timezone == "Asia/Shanghai"


def test_upstream_config_from_settings(settings: Settings) -> None:
    config = UpstreamConfig.from_settings(settings)

    assert config.base_url == "https://llm.example.com/v1/chat/completions"
    assert config.model == "test-model"
    assert config.api_key == "test-key"
    assert config.timeout_seconds < settings.platform_max_duration_seconds


def test_upstream_config_lists_missing_variables(settings: Settings) -> None:
    incomplete = settings.model_copy(update={"model_name": None, "api_key": ""})

    with pytest.raises(ConfigurationError) as excinfo:
        UpstreamConfig.from_settings(incomplete)

    assert str(excinfo.value) == "Missing AI configuration: MODEL_NAME, API_KEY"
    assert excinfo.value.category == "configuration"


def test_upstream_timeout_must_fit_platform_limit(settings: Settings) -> None:
    too_slow = settings.model_copy(update={"ai_timeout_seconds": 60.0})

    with pytest.raises(ConfigurationError, match="AI_TIMEOUT_SECONDS"):
        UpstreamConfig.from_settings(too_slow)
