"""Repository implementations for persistence and remote reads."""

from .goal_repository import GoalRepository
from .local_storage_repository import KeyValueStore, LocalStorageRepository
from .meal_plan_repository import MealPlanRepository
from .nutrition_repository import NutritionRepository

__all__ = [
    "GoalRepository",
    "KeyValueStore",
    "LocalStorageRepository",
    "MealPlanRepository",
    "NutritionRepository",
]
