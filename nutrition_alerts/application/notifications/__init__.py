"""Notification store, derivation rules and the engine that schedules them."""

from .derivation import (
    CREATE_MEAL_PLAN_MESSAGE,
    MEAL_SLOTS,
    DerivationEngine,
    MealSlot,
    build_meal_candidate,
    build_protein_candidate,
    meal_reminder_id,
    slot_for_hour,
)
from .engine import NotificationEngine, NotificationsState
from .factory import build_notification_engine
from .formatting import badge_label, display_time, type_label
from .goal_check import TRACK_FOOD_MESSAGE, RemoteGoalCheck, goal_reminder_id
from .registry import NotificationEngineRegistry
from .store import STORAGE_KEY, NotificationStore

__all__ = [
    "CREATE_MEAL_PLAN_MESSAGE",
    "DerivationEngine",
    "MEAL_SLOTS",
    "MealSlot",
    "NotificationEngine",
    "NotificationEngineRegistry",
    "NotificationStore",
    "NotificationsState",
    "RemoteGoalCheck",
    "STORAGE_KEY",
    "TRACK_FOOD_MESSAGE",
    "badge_label",
    "build_meal_candidate",
    "build_notification_engine",
    "build_protein_candidate",
    "display_time",
    "goal_reminder_id",
    "meal_reminder_id",
    "slot_for_hour",
    "type_label",
]
