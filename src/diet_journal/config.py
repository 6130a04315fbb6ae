"""Application configuration."""

import os
from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict

from diet_journal.domain.meals import DEFAULT_REGION_TIMEZONE
from diet_journal.errors import ConfigurationError

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    ai_base_url: str | None = None
    model_name: str | None = None
    api_key: str | None = None
    ai_temperature: float = 0.7
    ai_max_tokens: int = 2000
    ai_timeout_seconds: float = 55.0
    platform_max_duration_seconds: float = 60.0
    region_timezone: str = DEFAULT_REGION_TIMEZONE
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


@dataclass(frozen=True)
class UpstreamConfig:
    """Validated settings for the chat-completion endpoint."""

    base_url: str
    model: str
    api_key: str
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout_seconds: float = 55.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "UpstreamConfig":
        """Build the upstream config, failing on any missing variable."""
        required = {
            "AI_BASE_URL": settings.ai_base_url,
            "MODEL_NAME": settings.model_name,
            "API_KEY": settings.api_key,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigurationError(
                f"Missing AI configuration: {', '.join(missing)}"
            )
        if settings.ai_timeout_seconds >= settings.platform_max_duration_seconds:
            raise ConfigurationError(
                "AI_TIMEOUT_SECONDS must be shorter than "
                "PLATFORM_MAX_DURATION_SECONDS"
            )
        return cls(
            base_url=str(settings.ai_base_url),
            model=str(settings.model_name),
            api_key=str(settings.api_key),
            temperature=settings.ai_temperature,
            max_tokens=settings.ai_max_tokens,
            timeout_seconds=settings.ai_timeout_seconds,
        )
