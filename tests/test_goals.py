"""Tests for goal progress and goal updates."""

import asyncio
from datetime import timedelta

import pytest

from nutriplus.domain.errors import ValidationError
from nutriplus.domain.goals import DEFAULT_GOALS, MacroGoals
from nutriplus.domain.stats import MacroTotals
from nutriplus.services.entitlement import EntitlementTracker
from nutriplus.services.goals import GoalService, GoalTracker, progress, progress_for
from nutriplus.services.notifications import InMemoryNotifier, NotificationKind
from tests.conftest import InMemoryProfileRepository, make_identity

GOALS = MacroGoals(calories=2000, protein=150, carbs=250, fat=70)


def _tracker(age: timedelta = timedelta(days=1), **kwargs) -> GoalTracker:
    notifier = InMemoryNotifier()
    entitlement = EntitlementTracker(notifier=notifier)
    entitlement.on_identity(make_identity(age=age))
    return GoalTracker(entitlement=entitlement, **kwargs)


def test_progress_over_target() -> None:
    result = progress(2500, 2000)

    assert result is not None
    assert result.percent == 125
    assert result.over_target is True
    assert result.display_percent == 100
    assert result.label == "125% (exceeded)"


def test_progress_rounds_half_up() -> None:
    result = progress(3, 8)

    assert result is not None
    assert result.percent == 38
    assert result.over_target is False


def test_progress_is_undefined_without_target() -> None:
    assert progress(500, 0) is None


def test_progress_for_is_independent_per_macro() -> None:
    totals = MacroTotals(calories=1000, protein=200, carbs=0, fat=35)

    goals = MacroGoals(calories=2000, protein=150, carbs=0, fat=70)

    result = progress_for(totals, goals)

    assert result["calories"].percent == 50
    assert result["protein"].over_target is True
    assert result["carbs"] is None
    assert result["fat"].label == "50%"


def test_negative_goal_is_rejected() -> None:
    with pytest.raises(ValidationError):
        MacroGoals(calories=2000, protein=-1, carbs=0, fat=0)


def test_tracker_needs_onboarding_until_calories_set() -> None:
    tracker = _tracker()

    assert tracker.needs_onboarding is True
    tracker.update(GOALS)
    assert tracker.needs_onboarding is False


def test_locked_user_cannot_update_goals() -> None:
    tracker = _tracker(age=timedelta(days=9))

    assert tracker.update(GOALS) is None
    assert tracker.goals == DEFAULT_GOALS


def test_onboarding_bypass_when_enabled() -> None:
    tracker = _tracker(age=timedelta(days=9), onboarding_bypasses_lock=True)

    assert tracker.update(GOALS) is None
    assert tracker.update(GOALS, onboarding=True) is not None
    assert tracker.goals == GOALS


def test_rollback_keeps_later_update() -> None:
    tracker = _tracker()
    first = tracker.update(GOALS)
    later_goals = MacroGoals(calories=1800, protein=140, carbs=200, fat=60)
    tracker.update(later_goals)

    tracker.rollback(first)

    assert tracker.goals == later_goals


def test_goal_service_commit_failure_restores_previous_goals() -> None:
    repository = InMemoryProfileRepository(fail=True)
    service = GoalService(repository)
    notifier = InMemoryNotifier()
    tracker = _tracker()
    change = tracker.update(GOALS)

    result = asyncio.run(service.commit("user-1", tracker, change, notifier))

    assert result is False
    assert tracker.goals == DEFAULT_GOALS
    assert notifier.drain()[0].kind is NotificationKind.ERROR


def test_goal_service_commit_persists() -> None:
    repository = InMemoryProfileRepository()
    service = GoalService(repository)
    notifier = InMemoryNotifier()
    tracker = _tracker()
    change = tracker.update(GOALS)

    assert asyncio.run(service.commit("user-1", tracker, change, notifier)) is True
    assert service.load("user-1") == GOALS
    assert service.load("someone-else") == DEFAULT_GOALS
