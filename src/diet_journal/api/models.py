"""Request models for the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field


class RecommendationRequest(BaseModel):
    """Body of a recommendation request."""

    model_config = ConfigDict(populate_by_name=True)

    meal_type: str | None = Field(default=None, alias="mealType")
