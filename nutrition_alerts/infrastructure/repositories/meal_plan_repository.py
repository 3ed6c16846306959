"""Read access to the ``meal_plans`` table."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from nutrition_alerts.domain.entities import Meal, MealPlan

from .supabase_repository import SupabaseRepository

logger = logging.getLogger(__name__)


class MealPlanRepository(SupabaseRepository):
    """Load the most recent meal plan of a user."""

    table = "meal_plans"

    async def latest_for_user(self, user_id: str) -> MealPlan | None:
        rows = await self._fetch(
            lambda query: query.select("id, user_id, meals, created_at")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(1)
        )
        if not rows:
            return None
        return self._to_entity(rows[0])

    @staticmethod
    def _to_entity(row: Mapping[str, Any]) -> MealPlan:
        raw_meals = row.get("meals")
        if isinstance(raw_meals, str):
            # Older rows stored the meal list as an encoded JSON string.
            try:
                raw_meals = json.loads(raw_meals)
            except ValueError:
                logger.warning("Meal plan %s has an unreadable meal list", row.get("id"))
                raw_meals = []
        meals = tuple(
            Meal.from_payload(item)
            for item in (raw_meals if isinstance(raw_meals, list) else [])
            if isinstance(item, Mapping)
        )
        return MealPlan(
            id=row.get("id"),
            user_id=str(row.get("user_id") or ""),
            meals=meals,
            created_at=_parse_timestamp(row.get("created_at")),
        )


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


__all__ = ["MealPlanRepository"]
