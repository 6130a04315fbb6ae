"""Streaming relay between the chat-completion endpoint and the client."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from contextlib import aclosing
from dataclasses import dataclass
from functools import partial
from typing import Protocol
from uuid import UUID

from diet_journal.domain import relay
from diet_journal.domain.meals import MealSlot
from diet_journal.domain.recommendation import PromptContext
from diet_journal.domain.relay import RelayPhase, RelayState
from diet_journal.errors import (
    CollectionError,
    UpstreamError,
    UpstreamTimeoutError,
)
from diet_journal.services.meal_data import MealDataService
from diet_journal.services.prompts import (
    build_recommendation_prompt,
    build_today_summary_prompt,
)
from diet_journal.services.sse import SseParser, StreamFrame, extract_delta

logger = logging.getLogger(__name__)

DisconnectCheck = Callable[[], Awaitable[bool]]


class UpstreamStream(Protocol):
    """Readable body of an accepted upstream response."""

    def aiter_bytes(self) -> AsyncIterator[bytes]:
        """Yield raw body chunks as they arrive."""

    async def aclose(self) -> None:
        """Release the upstream connection."""


class ChatCompletionClient(Protocol):
    """Interface for streaming chat completions."""

    async def open_stream(self, prompt: str, timeout: float) -> UpstreamStream:
        """Send the prompt and return the stream once upstream accepts it."""


@dataclass
class RecommendationStream:
    """An upstream stream in the STREAMING phase, decoded into text deltas."""

    upstream: UpstreamStream
    state: RelayState
    deadline: float | None = None

    async def deltas(
        self, is_disconnected: DisconnectCheck | None = None
    ) -> AsyncIterator[str]:
        """Yield text deltas in arrival order until upstream finishes.

        The client connection is checked before every read, so a disconnect
        stops consumption within one read cycle. The upstream response is
        always closed on exit.
        """
        parser = SseParser()
        try:
            async with aclosing(self.upstream.aiter_bytes()) as chunks:
                while self.state.phase is RelayPhase.STREAMING:
                    if is_disconnected is not None and await is_disconnected():
                        logger.info("Client disconnected; stopping upstream read")
                        self.state = relay.failed(self.state, "client-disconnected")
                        return
                    try:
                        async with asyncio.timeout_at(self.deadline):
                            chunk = await anext(chunks)
                    except StopAsyncIteration:
                        for delta in self._consume(parser.flush()):
                            yield delta
                        if self.state.phase is RelayPhase.STREAMING:
                            self.state = relay.finished(self.state)
                        return
                    except TimeoutError as exc:
                        self.state = relay.failed(self.state, "timeout")
                        logger.warning(
                            "Upstream stream timed out after %s bytes",
                            self.state.bytes_sent,
                        )
                        raise UpstreamTimeoutError(
                            "Upstream stream exceeded the deadline"
                        ) from exc
                    except (UpstreamError, UpstreamTimeoutError) as exc:
                        self.state = relay.failed(self.state, exc.category)
                        logger.warning(
                            "Upstream stream failed after %s bytes: %s",
                            self.state.bytes_sent,
                            exc,
                        )
                        raise
                    for delta in self._consume(parser.feed(chunk)):
                        yield delta
        finally:
            await self.upstream.aclose()

    def _consume(self, frames: list[StreamFrame]) -> Iterator[str]:
        for frame in frames:
            if frame.is_done:
                self.state = relay.finished(self.state)
                return
            delta = extract_delta(frame)
            if delta:
                self.state = relay.forwarded(self.state, delta)
                yield delta


@dataclass
class RecommendationService:
    """Collects data, builds the prompt and opens the upstream stream.

    Collection goes through the blocking Supabase client and runs in a
    worker thread.
    """

    meal_data: MealDataService
    client: ChatCompletionClient
    timeout_seconds: float

    async def recommend(
        self, user_id: UUID | None, meal_slot: MealSlot
    ) -> RecommendationStream:
        """Start a streamed recommendation for the given meal slot."""
        tz = self.meal_data.timezone
        return await self._start(
            f"{meal_slot} recommendation",
            user_id,
            partial(self.meal_data.collect, user_id, meal_slot),
            lambda context: build_recommendation_prompt(
                context.profile,
                context.recent_meals,
                context.todays_meals,
                meal_slot,
                tz,
            ),
        )

    async def summarize_today(self, user_id: UUID | None) -> RecommendationStream:
        """Start a streamed summary of today's meals."""
        tz = self.meal_data.timezone
        return await self._start(
            "daily summary",
            user_id,
            partial(self.meal_data.collect_today, user_id),
            lambda context: build_today_summary_prompt(
                context.profile, context.todays_meals, tz
            ),
        )

    async def _start(
        self,
        kind: str,
        user_id: UUID | None,
        collect: Callable[[], PromptContext],
        render: Callable[[PromptContext], str],
    ) -> RecommendationStream:
        state = relay.start()
        try:
            context = await asyncio.to_thread(collect)
        except CollectionError as exc:
            state = relay.failed(state, exc.category)
            logger.warning("%s %s: %s", kind, state.phase, exc)
            raise
        state = relay.collected(state)

        prompt = render(context)
        deadline = asyncio.get_running_loop().time() + self.timeout_seconds
        try:
            upstream = await self.client.open_stream(prompt, self.timeout_seconds)
        except (UpstreamError, UpstreamTimeoutError) as exc:
            state = relay.failed(state, exc.category)
            logger.warning("%s %s: %s", kind, state.phase, exc)
            raise
        logger.info("Streaming %s for user %s", kind, user_id)
        return RecommendationStream(
            upstream=upstream, state=relay.dispatched(state), deadline=deadline
        )
