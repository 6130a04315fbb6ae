"""Supabase repository for meal records."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client, PostgrestAPIError

from diet_journal.domain.meals import InvalidMealSlotError, MealRecord, parse_meal_slot
from diet_journal.errors import CollectionError
from diet_journal.services.meal_data import MealRecordRepository


@dataclass
class SupabaseMealRepository(MealRecordRepository):
    """Supabase implementation for meal record reads."""

    client: Client

    def list_meals(
        self, user_id: UUID, start: datetime, end: datetime, newest_first: bool
    ) -> list[MealRecord]:
        """Return the user's meals eaten in ``[start, end)``."""
        try:
            response = (
                self.client.table("meal_logs")
                .select(
                    "id, photo_paths, content, meal_type, eaten_at, location, "
                    "tags, price"
                )
                .eq("user_id", str(user_id))
                .gte("eaten_at", start.isoformat())
                .lt("eaten_at", end.isoformat())
                .order("eaten_at", desc=newest_first)
                .execute()
            )
        except PostgrestAPIError as exc:
            raise CollectionError(f"Meal query failed: {exc}") from exc
        try:
            return [_parse_row(row) for row in response.data or []]
        except InvalidMealSlotError as exc:
            raise CollectionError(f"Stored meal has an invalid slot: {exc}") from exc


def _parse_row(row: dict[str, object]) -> MealRecord:
    return MealRecord(
        id=UUID(str(row["id"])),
        meal_slot=parse_meal_slot(str(row.get("meal_type"))),
        eaten_at=datetime.fromisoformat(str(row["eaten_at"])),
        description=row.get("content") or None,
        photo_paths=tuple(row.get("photo_paths") or ()),
        location=row.get("location") or None,
        tags=tuple(row.get("tags") or ()),
        price=float(row.get("price") or 0.0),
    )
