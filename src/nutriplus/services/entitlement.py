"""Trial and subscription entitlement."""

import logging
import math
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from nutriplus.domain.entitlement import EntitlementState, EntitlementTag, Identity
from nutriplus.services.notifications import NotificationKind, Notifier

TRIAL_DAYS = 3
UPGRADE_MESSAGE = "Your free trial has ended. Subscribe to keep saving changes."

_DAY = timedelta(days=1)
_logger = logging.getLogger(__name__)


def evaluate(
    account_created_at: datetime,
    now: datetime,
    subscription_active: bool,
    trial_days: int = TRIAL_DAYS,
) -> EntitlementState:
    """Compute the entitlement state from account age and subscription flag.

    Elapsed time is rounded up to whole days and clamped at zero, so a
    creation instant in the future (clock skew) counts as a brand new account.
    Exactly ``trial_days`` elapsed still counts as trialing.
    """
    if subscription_active:
        return EntitlementState(tag=EntitlementTag.SUBSCRIBED, trial_days_remaining=0)
    elapsed = max(now - account_created_at, timedelta(0))
    elapsed_days = math.ceil(elapsed / _DAY)
    remaining = max(0, trial_days - elapsed_days)
    if elapsed_days > trial_days:
        return EntitlementState(tag=EntitlementTag.LOCKED, trial_days_remaining=0)
    return EntitlementState(
        tag=EntitlementTag.TRIALING, trial_days_remaining=remaining
    )


@dataclass
class EntitlementTracker:
    """Holds the entitlement of one session and gates write operations."""

    notifier: Notifier
    trial_days: int = TRIAL_DAYS
    state: EntitlementState = field(
        default_factory=lambda: EntitlementState(
            tag=EntitlementTag.TRIALING, trial_days_remaining=TRIAL_DAYS
        )
    )

    def on_identity(
        self, identity: Identity, now: datetime | None = None
    ) -> EntitlementState:
        """Re-evaluate entitlement for a session start or change event."""
        self.state = evaluate(
            identity.account_created_at,
            now or datetime.now(tz=UTC),
            identity.subscription_active,
            trial_days=self.trial_days,
        )
        return self.state

    def guard(self) -> bool:
        """Return True when a write may proceed.

        A refusal is not an error: it queues an upgrade prompt and the caller
        skips the mutation.
        """
        if not self.state.is_locked:
            return True
        _logger.info("Write refused: trial expired")
        self.notifier.notify(NotificationKind.UPGRADE_REQUIRED, UPGRADE_MESSAGE)
        return False
