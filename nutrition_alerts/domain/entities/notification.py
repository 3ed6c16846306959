"""Domain entities representing in-app notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    """Category of a notification; also the partition key for deduplication."""

    GOAL = "goal"
    MEAL = "meal"
    SYSTEM = "system"


@dataclass
class Notification:
    """Message shown in the user's notification list."""

    id: str
    message: str
    type: NotificationType
    created_at: datetime
    time: str | None = None
    is_read: bool = False


@dataclass(frozen=True)
class NotificationCandidate:
    """A notification proposed to the store, before defaults are assigned.

    ``id`` is only given when the candidate has a natural key such as
    ``meal-reminder-dinner-2024-05-01``.
    """

    message: str
    type: NotificationType
    time: str | None = None
    id: str | None = None


__all__ = ["Notification", "NotificationCandidate", "NotificationType"]
