"""AI recommendation endpoints streaming plain-text deltas."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import TYPE_CHECKING

from fastapi import APIRouter, Header, Request, status
from fastapi.responses import JSONResponse, Response, StreamingResponse

from diet_journal.api.models import RecommendationRequest
from diet_journal.domain.meals import InvalidMealSlotError, MealSlot, parse_meal_slot
from diet_journal.errors import RecommendationError

if TYPE_CHECKING:
    from uuid import UUID

    from diet_journal.containers import AppContainer
    from diet_journal.services.recommendation import RecommendationStream

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["recommendation"])

DEFAULT_MEAL_SLOT = MealSlot.DINNER
INVALID_BODY_MESSAGE = (
    "Request body must be a JSON object with an optional string mealType."
)
STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "X-Accel-Buffering": "no",
}


@router.post("/ai-recommendation")
async def ai_recommendation(
    request: Request,
    payload: RecommendationRequest | None = None,
    authorization: str | None = Header(default=None),
) -> Response:
    """Stream a recommendation for the requested meal slot."""
    container: AppContainer = request.app.state.container
    raw_slot = payload.meal_type if payload and payload.meal_type else None
    try:
        meal_slot = parse_meal_slot(raw_slot or DEFAULT_MEAL_SLOT)
    except InvalidMealSlotError as exc:
        return validation_error_response(str(exc))
    user_id = await _resolve_user(container, authorization)
    try:
        stream = await container.recommendation_service.recommend(user_id, meal_slot)
    except RecommendationError as exc:
        return _error_response(exc)
    return await _relay(stream, request)


@router.post("/ai-summary")
async def ai_summary(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Response:
    """Stream a summary of today's meals."""
    container: AppContainer = request.app.state.container
    user_id = await _resolve_user(container, authorization)
    try:
        stream = await container.recommendation_service.summarize_today(user_id)
    except RecommendationError as exc:
        return _error_response(exc)
    return await _relay(stream, request)


async def _relay(stream: RecommendationStream, request: Request) -> Response:
    """Wait for the first delta, then commit to a streaming response.

    Failures before the first byte still get a JSON error; later failures
    abort the chunked response.
    """
    deltas = stream.deltas(request.is_disconnected)
    try:
        first = await anext(deltas, None)
    except RecommendationError as exc:
        await deltas.aclose()
        return _error_response(exc)
    return StreamingResponse(
        _prepend(first, deltas),
        media_type="text/plain; charset=utf-8",
        headers=STREAM_HEADERS,
    )


async def _prepend(first: str | None, rest: AsyncIterator[str]) -> AsyncIterator[str]:
    async with aclosing(rest):
        if first is not None:
            yield first
        async for delta in rest:
            yield delta


async def _resolve_user(
    container: AppContainer, authorization: str | None
) -> UUID | None:
    token = _bearer_token(authorization)
    if token is None:
        return None
    return await asyncio.to_thread(container.auth_gateway.resolve_user_id, token)


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _error_response(exc: RecommendationError) -> JSONResponse:
    logger.error("Recommendation failed (%s): %s", exc.category, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": exc.user_message,
            "category": exc.category,
        },
    )


def validation_error_response(message: str) -> JSONResponse:
    """Reject a malformed request with the standard failure envelope."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": message, "category": "validation"},
    )
