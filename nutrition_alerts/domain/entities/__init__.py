"""Domain entities exposed by the application."""

from .meal_plan import Meal, MealPlan
from .notification import Notification, NotificationCandidate, NotificationType
from .nutrition_progress import NutritionProgress
from .session_user import SessionUser

__all__ = [
    "Meal",
    "MealPlan",
    "Notification",
    "NotificationCandidate",
    "NotificationType",
    "NutritionProgress",
    "SessionUser",
]
