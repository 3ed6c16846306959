"""On-demand goal reminder used by the notification panel refresh."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Protocol

from nutrition_alerts.domain.entities import (
    Notification,
    NotificationCandidate,
    NotificationType,
)
from nutrition_alerts.infrastructure.errors import StoreReadError

from .derivation import SessionCheck
from .store import NotificationStore

logger = logging.getLogger(__name__)

TRACK_FOOD_MESSAGE = "Track your food today to meet your nutrition goals!"


class GoalStore(Protocol):
    async def has_goals(self, user_id: str) -> bool: ...


def goal_reminder_id(day: date) -> str:
    return f"goal-reminder-{day.isoformat()}"


class RemoteGoalCheck:
    """Remind users with goals to track food, at most once per day.

    This check is independent of the goal rule run by the derivation pass:
    both look for an existing goal notification before their remote read, so
    two different goal reminders can land on the same day when the reads
    overlap.
    """

    def __init__(self, store: NotificationStore, goals: GoalStore) -> None:
        self._store = store
        self._goals = goals

    async def run(
        self,
        user_id: str,
        now: datetime,
        is_active: SessionCheck = lambda: True,
    ) -> Notification | None:
        today = now.date()
        if self._store.has_type_on(NotificationType.GOAL, today):
            return None

        try:
            has_goals = await self._goals.has_goals(user_id)
        except StoreReadError as exc:
            logger.warning("Could not check goals for %s: %s", user_id, exc)
            return None

        if not has_goals or not is_active():
            return None
        return self._store.add(
            NotificationCandidate(
                id=goal_reminder_id(today),
                message=TRACK_FOOD_MESSAGE,
                type=NotificationType.GOAL,
            )
        )


__all__ = ["GoalStore", "RemoteGoalCheck", "TRACK_FOOD_MESSAGE", "goal_reminder_id"]
