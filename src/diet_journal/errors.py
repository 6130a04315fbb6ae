"""Error types surfaced by the recommendation flow.

Each error carries a ``category`` and a ``user_message`` that is safe to show
to end users. The exception text itself is for logs only.
"""

from typing import ClassVar


class RecommendationError(Exception):
    """Base class for failures of a recommendation request."""

    category: ClassVar[str] = "unknown"
    user_message: ClassVar[str] = "Something went wrong. Please try again later."


class ConfigurationError(RecommendationError):
    """Required upstream settings are missing or invalid."""

    category = "configuration"
    user_message = "AI recommendations are not configured on this server."


class CollectionError(RecommendationError):
    """Profile or meal data could not be loaded."""

    category = "collection"
    user_message = "Could not load your profile or meal records. Please try again."


class NotAuthenticatedError(CollectionError):
    """The request is not tied to a signed-in user."""

    user_message = "Please sign in again."


class UpstreamError(RecommendationError):
    """The chat-completion endpoint failed or returned an error status."""

    category = "upstream"
    user_message = "The recommendation service is unavailable. Please try again later."

    def __init__(
        self, message: str, *, status_code: int | None = None, body: str | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamTimeoutError(RecommendationError):
    """The chat-completion endpoint exceeded the request deadline."""

    category = "timeout"
    user_message = "The recommendation request timed out. Please try again."
