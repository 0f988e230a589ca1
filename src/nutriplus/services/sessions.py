"""Per-user session state and its lifecycle."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from nutriplus.domain.entitlement import EntitlementTag, Identity
from nutriplus.domain.errors import StoreError
from nutriplus.domain.meals import MealRecord
from nutriplus.domain.recipes import Recipe
from nutriplus.services.entitlement import TRIAL_DAYS, EntitlementTracker
from nutriplus.services.goals import GoalService, GoalTracker
from nutriplus.services.ledger import MealLedger
from nutriplus.services.meals import MealLogService
from nutriplus.services.notifications import InMemoryNotifier, NotificationKind
from nutriplus.services.recipes import RecipeService

SUBSCRIBED_MESSAGE = "Subscription confirmed. Thanks for going Pro."

_logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Resolves access tokens into identities."""

    def get_identity(self, access_token: str) -> Identity | None:
        """Return the identity for a token, or None when it is invalid."""


@dataclass
class UserSession:
    """Local state of one signed-in user."""

    identity: Identity
    notifier: InMemoryNotifier
    entitlement: EntitlementTracker
    goals: GoalTracker
    ledger: MealLedger = field(default_factory=MealLedger)
    saved_recipes: list[Recipe] = field(default_factory=list)
    timezone: str = "UTC"

    def apply_identity(self, identity: Identity, now: datetime | None = None) -> None:
        """Handle an identity event by re-evaluating entitlement."""
        self.identity = identity
        self.entitlement.on_identity(identity, now)


@dataclass
class SessionService:
    """Creates, refreshes and drops user sessions."""

    identity_provider: IdentityProvider
    meal_log_service: MealLogService
    goal_service: GoalService
    recipe_service: RecipeService
    default_timezone: str = "UTC"
    trial_days: int = TRIAL_DAYS
    onboarding_bypasses_lock: bool = False
    notification_limit: int = 20
    sessions: dict[str, UserSession] = field(default_factory=dict)

    async def resolve(
        self, access_token: str, now: datetime | None = None
    ) -> UserSession | None:
        """Return the session for a token, opening and loading it if needed."""
        session, _ = await self._open(access_token, now)
        return session

    async def refresh(
        self, access_token: str, now: datetime | None = None
    ) -> UserSession | None:
        """Handle a session change event: re-read identity and reload data."""
        session, created = await self._open(access_token, now)
        if session is not None and not created:
            await self.load(session)
        return session

    async def _open(
        self, access_token: str, now: datetime | None
    ) -> tuple[UserSession | None, bool]:
        identity = await asyncio.to_thread(
            self.identity_provider.get_identity, access_token
        )
        if identity is None:
            return None, False
        session = self.sessions.get(identity.user_id)
        if session is None:
            session = self._new_session(identity, now)
            self.sessions[identity.user_id] = session
            await self.load(session)
            return session, True
        session.apply_identity(identity, now)
        return session, False

    async def activate_subscription(
        self, access_token: str, now: datetime | None = None
    ) -> UserSession | None:
        """Re-read identity after checkout so a new subscription unlocks writes."""
        session = await self.refresh(access_token, now)
        if session is None:
            return None
        if session.entitlement.state.tag is EntitlementTag.SUBSCRIBED:
            session.notifier.notify(NotificationKind.SUCCESS, SUBSCRIBED_MESSAGE)
        else:
            _logger.info(
                "Subscription not active yet for user %s", session.identity.user_id
            )
        return session

    async def load(self, session: UserSession) -> None:
        """Replace local state with the stored goals, meals and recipes."""
        user_id = session.identity.user_id
        try:
            goals = await asyncio.to_thread(self.goal_service.load, user_id)
            meals = await asyncio.to_thread(self.meal_log_service.load, user_id)
            recipes = await asyncio.to_thread(self.recipe_service.load, user_id)
        except StoreError:
            _logger.exception("Failed to load data for user %s", user_id)
            session.notifier.notify(NotificationKind.ERROR, "Could not load data.")
            return
        session.goals.goals = goals
        session.ledger = MealLedger(_unique_meals(meals, user_id))
        session.saved_recipes = list(recipes)

    def close(self, user_id: str) -> None:
        """Drop local state on logout."""
        self.sessions.pop(user_id, None)

    def _new_session(self, identity: Identity, now: datetime | None) -> UserSession:
        notifier = InMemoryNotifier(limit=self.notification_limit)
        entitlement = EntitlementTracker(notifier=notifier, trial_days=self.trial_days)
        session = UserSession(
            identity=identity,
            notifier=notifier,
            entitlement=entitlement,
            goals=GoalTracker(
                entitlement=entitlement,
                onboarding_bypasses_lock=self.onboarding_bypasses_lock,
            ),
            timezone=self.default_timezone,
        )
        session.apply_identity(identity, now)
        return session


def _unique_meals(meals: list[MealRecord], user_id: str) -> list[MealRecord]:
    unique: dict[str, MealRecord] = {}
    for record in meals:
        if record.id in unique:
            _logger.warning(
                "Skipping duplicate stored meal %s for user %s", record.id, user_id
            )
            continue
        unique[record.id] = record
    return list(unique.values())
