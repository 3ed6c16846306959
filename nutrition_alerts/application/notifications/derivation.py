"""Rules that turn time of day, meal plans and nutrition progress into notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol

from nutrition_alerts.domain.entities import (
    MealPlan,
    Notification,
    NotificationCandidate,
    NotificationType,
    NutritionProgress,
)
from nutrition_alerts.infrastructure.errors import StoreReadError

from .store import NotificationStore

logger = logging.getLogger(__name__)

PROTEIN_NUDGE_THRESHOLD = 0.8
CREATE_MEAL_PLAN_MESSAGE = "Create a meal plan to track your nutrition goals better!"

SessionCheck = Callable[[], bool]


class MealPlanStore(Protocol):
    async def latest_for_user(self, user_id: str) -> MealPlan | None: ...


class NutritionStore(Protocol):
    async def for_day(self, user_id: str, day: date) -> NutritionProgress | None: ...


@dataclass(frozen=True)
class MealSlot:
    """Hour window ``[start_hour, end_hour)`` during which a meal is reminded."""

    name: str
    start_hour: int
    end_hour: int
    display_time: str

    def contains(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour


MEAL_SLOTS: tuple[MealSlot, ...] = (
    MealSlot("breakfast", 5, 10, "8:00 AM"),
    MealSlot("lunch", 11, 14, "12:30 PM"),
    MealSlot("dinner", 17, 21, "7:00 PM"),
)


def slot_for_hour(hour: int) -> MealSlot | None:
    for slot in MEAL_SLOTS:
        if slot.contains(hour):
            return slot
    return None


def meal_reminder_id(slot: MealSlot, day: date) -> str:
    return f"meal-reminder-{slot.name}-{day.isoformat()}"


def build_meal_candidate(slot: MealSlot, plan: MealPlan | None, day: date) -> NotificationCandidate:
    """Compose the reminder for ``slot``, naming planned foods when there are any."""

    message = f"Don't forget to log your {slot.name}!"
    time = slot.display_time
    meal = plan.find_meal(slot.name) if plan is not None else None
    if meal is not None and meal.foods:
        message = f"Time for {slot.name}! Your plan includes {', '.join(meal.foods)}."
        time = meal.time or slot.display_time
    return NotificationCandidate(
        id=meal_reminder_id(slot, day),
        message=message,
        type=NotificationType.MEAL,
        time=time,
    )


def build_protein_candidate(
    progress: NutritionProgress | None,
    *,
    threshold: float = PROTEIN_NUDGE_THRESHOLD,
) -> NotificationCandidate | None:
    """Return a nudge when protein intake is below ``threshold`` of the goal."""

    if progress is None:
        return None
    ratio = progress.protein_ratio()
    if ratio is None or ratio >= threshold:
        return None
    remaining = round((1 - max(ratio, 0.0)) * 100)
    return NotificationCandidate(
        message=(
            f"You're {remaining}% away from your protein goal today. "
            "Add a protein-rich snack!"
        ),
        type=NotificationType.GOAL,
    )


class DerivationEngine:
    """Derive meal and goal reminders for one user and submit them to the store."""

    def __init__(
        self,
        store: NotificationStore,
        meal_plans: MealPlanStore,
        nutrition: NutritionStore,
        *,
        protein_threshold: float = PROTEIN_NUDGE_THRESHOLD,
    ) -> None:
        self._store = store
        self._meal_plans = meal_plans
        self._nutrition = nutrition
        self._protein_threshold = protein_threshold

    async def run_pass(
        self,
        user_id: str,
        now: datetime,
        is_active: SessionCheck = lambda: True,
    ) -> list[Notification]:
        """Run every rule once and return the notifications that were accepted."""

        accepted: list[Notification] = []
        for rule in (self.meal_reminder, self.goal_reminder):
            notification = await rule(user_id, now, is_active)
            if notification is not None:
                accepted.append(notification)
        return accepted

    async def meal_reminder(
        self,
        user_id: str,
        now: datetime,
        is_active: SessionCheck = lambda: True,
    ) -> Notification | None:
        slot = slot_for_hour(now.hour)
        if slot is None:
            return None
        today = now.date()
        if self._store.has_id(meal_reminder_id(slot, today)):
            return None

        try:
            plan = await self._meal_plans.latest_for_user(user_id)
        except StoreReadError as exc:
            logger.warning("Meal plan unavailable for %s reminder: %s", slot.name, exc)
            plan = None

        if not is_active():
            logger.debug("Session for %s ended; dropping %s reminder", user_id, slot.name)
            return None
        return self._store.add(build_meal_candidate(slot, plan, today))

    async def goal_reminder(
        self,
        user_id: str,
        now: datetime,
        is_active: SessionCheck = lambda: True,
    ) -> Notification | None:
        if self._store.has_type_on(NotificationType.GOAL, now.date()):
            return None

        try:
            plan = await self._meal_plans.latest_for_user(user_id)
            if plan is None:
                candidate: NotificationCandidate | None = NotificationCandidate(
                    message=CREATE_MEAL_PLAN_MESSAGE, type=NotificationType.GOAL
                )
            else:
                progress = await self._nutrition.for_day(user_id, now.date())
                candidate = build_protein_candidate(
                    progress, threshold=self._protein_threshold
                )
        except StoreReadError as exc:
            logger.warning("Skipping today's goal check for %s: %s", user_id, exc)
            return None

        if candidate is None or not is_active():
            return None
        return self._store.add(candidate)


__all__ = [
    "CREATE_MEAL_PLAN_MESSAGE",
    "DerivationEngine",
    "MEAL_SLOTS",
    "MealPlanStore",
    "MealSlot",
    "NutritionStore",
    "PROTEIN_NUDGE_THRESHOLD",
    "build_meal_candidate",
    "build_protein_candidate",
    "meal_reminder_id",
    "slot_for_hour",
]
