"""Supabase Auth identity provider."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import AuthError, Client

from nutriplus.adapters.supabase_errors import store_call
from nutriplus.domain.entitlement import Identity
from nutriplus.services.sessions import IdentityProvider

ACTIVE_SUBSCRIPTION = "active"
DEFAULT_DISPLAY_NAME = "User"

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Resolves Supabase access tokens into identities."""

    client: Client

    def get_identity(self, access_token: str) -> Identity | None:
        """Return the identity behind an access token, or None if rejected."""
        try:
            with store_call("load identity"):
                response = self.client.auth.get_user(access_token)
        except AuthError:
            _logger.info("Rejected access token")
            return None
        user = response.user if response else None
        if user is None:
            return None
        metadata = user.user_metadata or {}
        return Identity(
            user_id=str(user.id),
            account_created_at=_parse_created_at(user.created_at),
            subscription_active=metadata.get("subscription_status")
            == ACTIVE_SUBSCRIPTION,
            display_name=_first_name(metadata.get("full_name")),
            email=user.email,
        )


def _parse_created_at(value: object) -> datetime:
    if isinstance(value, datetime):
        created_at = value
    elif isinstance(value, str) and value:
        created_at = datetime.fromisoformat(value)
    else:
        return datetime.now(tz=UTC)
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=UTC)
    return created_at


def _first_name(full_name: object) -> str:
    if isinstance(full_name, str) and full_name.strip():
        return full_name.split()[0]
    return DEFAULT_DISPLAY_NAME
