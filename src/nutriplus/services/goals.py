"""Macro goal tracking and progress."""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Protocol

from nutriplus.domain.errors import StoreError
from nutriplus.domain.goals import DEFAULT_GOALS, MacroGoals, MacroProgress
from nutriplus.domain.stats import MacroTotals
from nutriplus.services.entitlement import EntitlementTracker
from nutriplus.services.notifications import NotificationKind, Notifier

_logger = logging.getLogger(__name__)


def progress(current: float, target: float) -> MacroProgress | None:
    """Compare a macro against its target.

    A target of zero (or less) means no goal is configured; progress is
    undefined and None is returned without dividing.
    """
    if target <= 0:
        return None
    percent = math.floor(current / target * 100 + 0.5)
    return MacroProgress(
        current=current,
        target=target,
        percent=percent,
        over_target=current > target,
    )


def progress_for(
    totals: MacroTotals, goals: MacroGoals
) -> dict[str, MacroProgress | None]:
    """Return progress for each macro independently."""
    return {
        "calories": progress(totals.calories, goals.calories),
        "protein": progress(totals.protein, goals.protein),
        "carbs": progress(totals.carbs, goals.carbs),
        "fat": progress(totals.fat, goals.fat),
    }


@dataclass(frozen=True)
class GoalUpdate:
    """A locally applied goal change awaiting store confirmation."""

    previous: MacroGoals
    goals: MacroGoals


@dataclass
class GoalTracker:
    """Holds the active goal set of one session."""

    entitlement: EntitlementTracker
    goals: MacroGoals = DEFAULT_GOALS
    onboarding_bypasses_lock: bool = False

    @property
    def needs_onboarding(self) -> bool:
        """Return True until a calories target has been configured."""
        return not self.goals.is_configured

    def update(
        self, new_goals: MacroGoals, onboarding: bool = False
    ) -> GoalUpdate | None:
        """Replace the goal set, or return None when the write is refused."""
        bypass = onboarding and self.onboarding_bypasses_lock
        if not bypass and not self.entitlement.guard():
            return None
        change = GoalUpdate(previous=self.goals, goals=new_goals)
        self.goals = new_goals
        return change

    def rollback(self, change: GoalUpdate) -> None:
        """Restore the previous goals unless a later update replaced them."""
        if self.goals == change.goals:
            self.goals = change.previous


class ProfileRepository(Protocol):
    """Persistence interface for the user profile."""

    def get_goals(self, user_id: str) -> MacroGoals | None:
        """Return stored goals, if a profile exists."""

    def update_goals(self, user_id: str, goals: MacroGoals) -> None:
        """Replace stored goals."""


@dataclass
class GoalService:
    """Persists goal changes after they are applied locally."""

    repository: ProfileRepository

    def load(self, user_id: str) -> MacroGoals:
        """Return stored goals or the unconfigured default."""
        return self.repository.get_goals(user_id) or DEFAULT_GOALS

    async def commit(
        self,
        user_id: str,
        tracker: GoalTracker,
        change: GoalUpdate,
        notifier: Notifier,
    ) -> bool:
        """Confirm a goal change with the store, rolling back on failure."""
        try:
            await asyncio.to_thread(self.repository.update_goals, user_id, change.goals)
        except StoreError:
            _logger.exception("Failed to save goals for user %s", user_id)
            tracker.rollback(change)
            notifier.notify(NotificationKind.ERROR, "Could not save goals.")
            return False
        notifier.notify(NotificationKind.SUCCESS, "Goals updated.")
        return True
