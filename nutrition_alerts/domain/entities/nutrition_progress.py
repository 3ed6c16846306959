"""Domain entity describing today's nutrition intake against goals."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class NutritionProgress:
    """Consumed/goal pairs recorded for a user on a given day."""

    user_id: str
    date: date
    protein_consumed: float = 0.0
    protein_goal: float = 0.0
    calories_consumed: float = 0.0
    calories_goal: float = 0.0
    carbs_consumed: float = 0.0
    carbs_goal: float = 0.0
    fat_consumed: float = 0.0
    fat_goal: float = 0.0

    def protein_ratio(self) -> float | None:
        """Return consumed/goal for protein, or ``None`` when no goal is set."""

        if self.protein_goal <= 0:
            return None
        return self.protein_consumed / self.protein_goal


__all__ = ["NutritionProgress"]
