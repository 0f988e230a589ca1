"""Tests for trial and subscription entitlement."""

from datetime import UTC, datetime, timedelta

from nutriplus.domain.entitlement import EntitlementTag
from nutriplus.services.entitlement import EntitlementTracker, evaluate
from nutriplus.services.notifications import InMemoryNotifier, NotificationKind
from tests.conftest import make_identity

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)


def test_new_account_is_trialing_with_full_trial() -> None:
    state = evaluate(NOW, NOW, subscription_active=False)

    assert state.tag is EntitlementTag.TRIALING
    assert state.trial_days_remaining == 3


def test_partial_day_counts_as_a_full_day() -> None:
    state = evaluate(NOW - timedelta(hours=1), NOW, subscription_active=False)

    assert state.tag is EntitlementTag.TRIALING
    assert state.trial_days_remaining == 2


def test_exactly_three_days_is_still_trialing() -> None:
    state = evaluate(NOW - timedelta(days=3), NOW, subscription_active=False)

    assert state.tag is EntitlementTag.TRIALING
    assert state.trial_days_remaining == 0


def test_past_trial_is_locked() -> None:
    state = evaluate(
        NOW - timedelta(days=3, seconds=1), NOW, subscription_active=False
    )

    assert state.tag is EntitlementTag.LOCKED
    assert state.is_locked


def test_subscription_overrides_account_age() -> None:
    state = evaluate(NOW - timedelta(days=400), NOW, subscription_active=True)

    assert state.tag is EntitlementTag.SUBSCRIBED
    assert not state.is_locked


def test_future_creation_time_is_treated_as_new_account() -> None:
    state = evaluate(NOW + timedelta(days=2), NOW, subscription_active=False)

    assert state.tag is EntitlementTag.TRIALING
    assert state.trial_days_remaining == 3


def test_guard_refuses_when_locked_and_prompts_upgrade() -> None:
    notifier = InMemoryNotifier()
    tracker = EntitlementTracker(notifier=notifier)
    tracker.on_identity(make_identity(age=timedelta(days=5)))

    assert tracker.guard() is False
    notifications = notifier.drain()
    assert [item.kind for item in notifications] == [
        NotificationKind.UPGRADE_REQUIRED
    ]


def test_guard_allows_after_subscription_event() -> None:
    notifier = InMemoryNotifier()
    tracker = EntitlementTracker(notifier=notifier)
    tracker.on_identity(make_identity(age=timedelta(days=5)))

    tracker.on_identity(make_identity(age=timedelta(days=5), subscribed=True))

    assert tracker.guard() is True
    assert notifier.peek() == []
