"""Transient user notifications."""

from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class NotificationKind(str, Enum):
    """Kind of transient notification."""

    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    UPGRADE_REQUIRED = "upgrade_required"


@dataclass(frozen=True)
class Notification:
    """A message shown once to the user."""

    kind: NotificationKind
    message: str
    created_at: datetime


class Notifier(Protocol):
    """Sink for user-visible notifications."""

    def notify(self, kind: NotificationKind, message: str) -> None:
        """Publish a notification."""


class InMemoryNotifier(Notifier):
    """Bounded in-memory notification queue drained by the API."""

    def __init__(self, limit: int = 20) -> None:
        self._items: deque[Notification] = deque(maxlen=limit)

    def notify(self, kind: NotificationKind, message: str) -> None:
        """Queue a notification, dropping the oldest when full."""
        self._items.append(
            Notification(kind=kind, message=message, created_at=datetime.now(tz=UTC))
        )

    def peek(self) -> list[Notification]:
        """Return queued notifications without removing them."""
        return list(self._items)

    def drain(self) -> list[Notification]:
        """Return and clear queued notifications."""
        items = list(self._items)
        self._items.clear()
        return items
