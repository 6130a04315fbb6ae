"""Supabase repository for user profiles."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import Client, PostgrestAPIError

from diet_journal.domain.profiles import ActivityLevel, UserProfile
from diet_journal.errors import CollectionError
from diet_journal.services.meal_data import ProfileRepository

logger = logging.getLogger(__name__)


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile reads."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile row for a user, if present."""
        try:
            response = (
                self.client.table("user_profiles")
                .select(
                    "user_id, display_name, height, weight, activity_level, "
                    "diet_goals, dietary_restrictions, allergies, daily_calorie_target"
                )
                .eq("user_id", str(user_id))
                .limit(1)
                .execute()
            )
        except PostgrestAPIError as exc:
            raise CollectionError(f"Profile query failed: {exc}") from exc
        if not response.data:
            return None
        return _parse_profile(response.data[0])


def _parse_profile(row: dict[str, object]) -> UserProfile:
    calorie_target = row.get("daily_calorie_target")
    return UserProfile(
        user_id=UUID(str(row["user_id"])),
        display_name=row.get("display_name") or None,
        height=_optional_float(row.get("height")),
        weight=_optional_float(row.get("weight")),
        activity_level=_parse_activity_level(row.get("activity_level")),
        diet_goals=tuple(row.get("diet_goals") or ()),
        dietary_restrictions=tuple(row.get("dietary_restrictions") or ()),
        allergies=tuple(row.get("allergies") or ()),
        daily_calorie_target=(
            int(calorie_target) if calorie_target is not None else None
        ),
    )


def _optional_float(value: object) -> float | None:
    return float(value) if value is not None else None


def _parse_activity_level(value: object) -> ActivityLevel | None:
    if value is None:
        return None
    try:
        return ActivityLevel(value)
    except ValueError:
        logger.warning("Ignoring unknown activity level %r", value)
        return None
