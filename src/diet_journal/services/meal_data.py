"""Access to the profile and meal data used for recommendations."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from diet_journal.domain.meals import (
    DEFAULT_REGION_TIMEZONE,
    HISTORY_DAYS,
    MealRecord,
    MealSlot,
)
from diet_journal.domain.profiles import UserProfile
from diet_journal.domain.recommendation import PromptContext
from diet_journal.errors import CollectionError, NotAuthenticatedError

logger = logging.getLogger(__name__)


class AuthGateway(Protocol):
    """Resolves access tokens to user identities."""

    def resolve_user_id(self, access_token: str) -> UUID | None:
        """Return the user id for a valid token, or None."""


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile if one exists."""


class MealRecordRepository(Protocol):
    """Persistence interface for meal records."""

    def list_meals(
        self, user_id: UUID, start: datetime, end: datetime, newest_first: bool
    ) -> list[MealRecord]:
        """Return meals eaten in ``[start, end)``."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class MealDataService:
    """Loads profile and meal windows in the regional timezone."""

    profiles: ProfileRepository
    meals: MealRecordRepository
    timezone_name: str = DEFAULT_REGION_TIMEZONE
    clock: Callable[[], datetime] = field(default=_utc_now)

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    def get_user_profile(self, user_id: UUID | None) -> UserProfile | None:
        """Return the profile, or None for anonymous or unprovisioned users."""
        if user_id is None:
            return None
        return self.profiles.get_profile(user_id)

    def get_recent_meals(
        self, user_id: UUID, days_back: int = HISTORY_DAYS
    ) -> list[MealRecord]:
        """Return meals from the regional days before today, newest first."""
        today_start = self._today_start()
        start = today_start - timedelta(days=days_back)
        return self.meals.list_meals(
            user_id, start.astimezone(UTC), today_start.astimezone(UTC), True
        )

    def get_todays_meals(self, user_id: UUID) -> list[MealRecord]:
        """Return meals from the current regional day, oldest first."""
        start = self._today_start()
        end = start + timedelta(days=1)
        return self.meals.list_meals(
            user_id, start.astimezone(UTC), end.astimezone(UTC), False
        )

    def collect(self, user_id: UUID | None, target_slot: MealSlot) -> PromptContext:
        """Gather everything a recommendation prompt needs."""
        profile = self._require_profile(user_id)
        recent = self.get_recent_meals(profile.user_id)
        today = self.get_todays_meals(profile.user_id)
        logger.info(
            "Collected %s recent and %s today meals for user %s",
            len(recent),
            len(today),
            user_id,
        )
        return PromptContext(
            profile=profile,
            recent_meals=recent,
            todays_meals=today,
            target_slot=target_slot,
        )

    def collect_today(self, user_id: UUID | None) -> PromptContext:
        """Gather the profile and today's meals, without history."""
        profile = self._require_profile(user_id)
        today = self.get_todays_meals(profile.user_id)
        logger.info("Collected %s today meals for user %s", len(today), user_id)
        return PromptContext(profile=profile, recent_meals=[], todays_meals=today)

    def _require_profile(self, user_id: UUID | None) -> UserProfile:
        if user_id is None:
            raise NotAuthenticatedError("Request has no authenticated user")
        profile = self.get_user_profile(user_id)
        if profile is None:
            raise CollectionError(f"No profile found for user {user_id}")
        return profile

    def _today_start(self) -> datetime:
        now = self.clock().astimezone(self.timezone)
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
