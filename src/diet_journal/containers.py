"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from diet_journal.adapters.chat_completion_client import HttpxChatCompletionClient
from diet_journal.adapters.supabase_auth_gateway import SupabaseAuthGateway
from diet_journal.adapters.supabase_meal_repository import SupabaseMealRepository
from diet_journal.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from diet_journal.config import Settings, UpstreamConfig
from diet_journal.services.meal_data import AuthGateway, MealDataService
from diet_journal.services.recommendation import RecommendationService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_gateway: AuthGateway
    meal_data_service: MealDataService
    recommendation_service: RecommendationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container.

    Raises ConfigurationError when the chat-completion settings are incomplete.
    """
    resolved_settings = settings or Settings()
    upstream_config = UpstreamConfig.from_settings(resolved_settings)
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    meal_data_service = MealDataService(
        profiles=SupabaseProfileRepository(supabase_client),
        meals=SupabaseMealRepository(supabase_client),
        timezone_name=resolved_settings.region_timezone,
    )
    completion_client = HttpxChatCompletionClient.create(upstream_config)
    recommendation_service = RecommendationService(
        meal_data=meal_data_service,
        client=completion_client,
        timeout_seconds=upstream_config.timeout_seconds,
    )

    async def close_resources() -> None:
        await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        auth_gateway=SupabaseAuthGateway(supabase_client),
        meal_data_service=meal_data_service,
        recommendation_service=recommendation_service,
        close_resources=close_resources,
    )
