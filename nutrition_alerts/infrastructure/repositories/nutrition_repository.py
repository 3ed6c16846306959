"""Read access to the daily ``nutrition_data`` rows."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from nutrition_alerts.domain.entities import NutritionProgress

from .supabase_repository import SupabaseRepository

_NUMERIC_FIELDS = (
    "protein_consumed",
    "protein_goal",
    "calories_consumed",
    "calories_goal",
    "carbs_consumed",
    "carbs_goal",
    "fat_consumed",
    "fat_goal",
)


class NutritionRepository(SupabaseRepository):
    """Load the nutrition progress recorded for a specific day."""

    table = "nutrition_data"

    async def for_day(self, user_id: str, day: date) -> NutritionProgress | None:
        rows = await self._fetch(
            lambda query: query.select("*")
            .eq("user_id", user_id)
            .eq("date", day.isoformat())
            .limit(1)
        )
        if not rows:
            return None
        return self._to_entity(rows[0], user_id=user_id, day=day)

    @staticmethod
    def _to_entity(row: Mapping[str, Any], *, user_id: str, day: date) -> NutritionProgress:
        values: dict[str, float] = {}
        for name in _NUMERIC_FIELDS:
            try:
                values[name] = float(row.get(name) or 0)
            except (TypeError, ValueError):
                values[name] = 0.0
        return NutritionProgress(user_id=user_id, date=day, **values)


__all__ = ["NutritionRepository"]
