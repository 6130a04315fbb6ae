"""HTTPX client for OpenAI-compatible streaming chat completions."""

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx

from diet_journal.config import UpstreamConfig
from diet_journal.errors import UpstreamError, UpstreamTimeoutError
from diet_journal.services.recommendation import ChatCompletionClient, UpstreamStream

logger = logging.getLogger(__name__)


@dataclass
class HttpxUpstreamStream(UpstreamStream):
    """Streaming httpx response with transport errors mapped to domain errors."""

    response: httpx.Response

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        """Yield body chunks as they are received."""
        try:
            async for chunk in self.response.aiter_bytes():
                yield chunk
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError("Upstream read timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Upstream stream broke: {exc}") from exc

    async def aclose(self) -> None:
        """Close the upstream response."""
        await self.response.aclose()


@dataclass
class HttpxChatCompletionClient(ChatCompletionClient):
    """Chat-completion client that requests server-sent events."""

    config: UpstreamConfig
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, config: UpstreamConfig) -> "HttpxChatCompletionClient":
        """Create a client with a managed httpx session."""
        return cls(config=config, http_client=httpx.AsyncClient())

    async def open_stream(self, prompt: str, timeout: float) -> HttpxUpstreamStream:
        """POST the prompt and return the response once headers arrive."""
        request = self.http_client.build_request(
            "POST",
            self.config.base_url,
            headers={
                "Authorization": f"Bearer {self.config.api_key}",
                "Accept": "text/event-stream",
            },
            json={
                "model": self.config.model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": self.config.temperature,
                "max_tokens": self.config.max_tokens,
                "stream": True,
            },
            timeout=timeout,
        )
        try:
            async with asyncio.timeout(timeout):
                response = await self.http_client.send(request, stream=True)
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise UpstreamTimeoutError(
                f"No response from upstream within {timeout:g}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Upstream request failed: {exc}") from exc

        if not response.is_success:
            body = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()
            logger.error(
                "Chat completion request failed: status=%s url=%s body=%s",
                response.status_code,
                self.config.base_url,
                body,
            )
            raise UpstreamError(
                f"Upstream returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=body,
            )
        return HttpxUpstreamStream(response)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
