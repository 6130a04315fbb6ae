"""Models for recommendation prompts and upstream completion frames."""

from dataclasses import dataclass

from pydantic import BaseModel

from diet_journal.domain.meals import MealRecord, MealSlot
from diet_journal.domain.profiles import UserProfile


@dataclass(frozen=True)
class PromptContext:
    """Inputs gathered for a single recommendation request."""

    profile: UserProfile
    recent_meals: list[MealRecord]
    todays_meals: list[MealRecord]
    target_slot: MealSlot | None = None


class ChunkDelta(BaseModel):
    """Incremental message content."""

    content: str | None = None


class ChunkChoice(BaseModel):
    """Single streamed choice."""

    delta: ChunkDelta | None = None


class ChatCompletionChunk(BaseModel):
    """One streamed chat-completion frame."""

    choices: list[ChunkChoice] = []

    def text(self) -> str | None:
        """Return the first choice's text delta, if any."""
        if not self.choices or self.choices[0].delta is None:
            return None
        return self.choices[0].delta.content or None
