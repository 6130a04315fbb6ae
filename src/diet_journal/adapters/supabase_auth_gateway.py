"""Supabase Auth lookup of the requesting user."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import AuthError, Client

from diet_journal.services.meal_data import AuthGateway

logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Validates access tokens against Supabase Auth."""

    client: Client

    def resolve_user_id(self, access_token: str) -> UUID | None:
        """Return the user id behind a Supabase access token."""
        try:
            response = self.client.auth.get_user(access_token)
        except AuthError as exc:
            logger.info("Rejected access token: %s", exc)
            return None
        if response is None or response.user is None:
            return None
        return UUID(response.user.id)
