"""Read-only views over meal plan records."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Meal:
    """Single meal inside a meal plan."""

    name: str
    time: str | None = None
    foods: tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Meal":
        """Build a meal from a JSON object, ignoring malformed optional fields."""

        name = payload.get("name")
        time = payload.get("time")
        raw_foods = payload.get("foods")
        foods: tuple[str, ...] = ()
        if isinstance(raw_foods, Sequence) and not isinstance(raw_foods, str):
            foods = tuple(
                str(food).strip() for food in raw_foods if str(food or "").strip()
            )
        display_time = str(time).strip() if time else ""
        return cls(name=str(name or ""), time=display_time or None, foods=foods)


@dataclass(frozen=True)
class MealPlan:
    """Most recent meal plan generated for a user."""

    id: str | None
    user_id: str
    meals: tuple[Meal, ...] = field(default_factory=tuple)
    created_at: datetime | None = None

    def find_meal(self, keyword: str) -> Meal | None:
        """Return the first meal whose name contains ``keyword`` (case-insensitive)."""

        needle = keyword.lower()
        for meal in self.meals:
            if needle in meal.name.lower():
                return meal
        return None


__all__ = ["Meal", "MealPlan"]
