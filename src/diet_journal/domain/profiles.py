"""User profile domain models."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


class ActivityLevel(StrEnum):
    """Self-reported activity level."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


ACTIVITY_LEVEL_LABELS: dict[ActivityLevel, str] = {
    ActivityLevel.SEDENTARY: "Sedentary (little or no exercise)",
    ActivityLevel.LIGHT: "Lightly active (exercise 1-3 days per week)",
    ActivityLevel.MODERATE: "Moderately active (exercise 3-5 days per week)",
    ActivityLevel.ACTIVE: "Active (exercise 6-7 days per week)",
    ActivityLevel.VERY_ACTIVE: "Very active (daily exercise or physical work)",
}


@dataclass(frozen=True)
class UserProfile:
    """Profile of a diet journal user."""

    user_id: UUID
    display_name: str | None = None
    height: float | None = None
    weight: float | None = None
    activity_level: ActivityLevel | None = None
    diet_goals: tuple[str, ...] = ()
    dietary_restrictions: tuple[str, ...] = ()
    allergies: tuple[str, ...] = ()
    daily_calorie_target: int | None = None
