"""Domain models for trial and subscription entitlement."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class EntitlementTag(str, Enum):
    """Access tier of a user."""

    TRIALING = "TRIALING"
    LOCKED = "LOCKED"
    SUBSCRIBED = "SUBSCRIBED"


@dataclass(frozen=True)
class EntitlementState:
    """Derived entitlement; never persisted."""

    tag: EntitlementTag
    trial_days_remaining: int = 0

    @property
    def is_locked(self) -> bool:
        return self.tag is EntitlementTag.LOCKED


@dataclass(frozen=True)
class Identity:
    """Identity data supplied at session start and on session changes."""

    user_id: str
    account_created_at: datetime
    subscription_active: bool
    display_name: str = "User"
    email: str | None = None
