"""Wire a notification engine to the configured infrastructure."""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy.orm import Session, sessionmaker

from nutrition_alerts.config import get_settings
from nutrition_alerts.infrastructure.database import SessionLocal
from nutrition_alerts.infrastructure.notifications import notification_publisher
from nutrition_alerts.infrastructure.repositories import (
    GoalRepository,
    LocalStorageRepository,
    MealPlanRepository,
    NutritionRepository,
)

from .derivation import DerivationEngine
from .engine import NotificationEngine
from .goal_check import RemoteGoalCheck
from .store import NotificationStore


def build_notification_engine(
    user_id: str,
    *,
    session_factory: sessionmaker[Session] = SessionLocal,
    publish: bool = True,
) -> NotificationEngine:
    """Build an engine for ``user_id`` with its cached notifications loaded.

    When ``publish`` is set every accepted notification is pushed to the
    user's websocket connections.
    """

    settings = get_settings()
    store = NotificationStore(LocalStorageRepository(session_factory, namespace=user_id))
    store.load()
    engine = NotificationEngine(
        store,
        DerivationEngine(store, MealPlanRepository(), NutritionRepository()),
        RemoteGoalCheck(store, GoalRepository()),
        refresh_interval=timedelta(minutes=settings.notification_refresh_minutes),
    )
    if publish:
        engine.subscribe(notification_publisher.for_user(user_id))
    return engine


__all__ = ["build_notification_engine"]
