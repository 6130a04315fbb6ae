"""Domain models for logged meals."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

HISTORY_DAYS = 7
DEFAULT_REGION_TIMEZONE = "Asia/Shanghai"


class MealSlot(StrEnum):
    """Meal slot tag; declaration order is the canonical display order."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    AFTERNOON_SNACK = "afternoon_snack"
    DINNER = "dinner"
    EVENING_SNACK = "evening_snack"
    SNACK = "snack"


MEAL_SLOT_LABELS: dict[MealSlot, str] = {
    MealSlot.BREAKFAST: "Breakfast",
    MealSlot.LUNCH: "Lunch",
    MealSlot.AFTERNOON_SNACK: "Afternoon snack",
    MealSlot.DINNER: "Dinner",
    MealSlot.EVENING_SNACK: "Evening snack",
    MealSlot.SNACK: "Snack",
}


class InvalidMealSlotError(ValueError):
    """Raised when a meal slot tag is outside the known enumeration."""


def parse_meal_slot(value: str) -> MealSlot:
    """Return the meal slot for a raw tag or fail naming the bad value."""
    try:
        return MealSlot(value)
    except ValueError as exc:
        allowed = ", ".join(slot.value for slot in MealSlot)
        raise InvalidMealSlotError(
            f"Unknown meal slot {value!r}; expected one of: {allowed}"
        ) from exc


@dataclass(frozen=True)
class MealRecord:
    """A single logged eating event."""

    id: UUID
    meal_slot: MealSlot
    eaten_at: datetime
    description: str | None = None
    photo_paths: tuple[str, ...] = ()
    location: str | None = None
    tags: tuple[str, ...] = ()
    price: float = 0.0
