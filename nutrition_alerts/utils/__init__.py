"""Utility helpers for reusable functionality."""

from .datetime import (
    calendar_day,
    get_app_timezone,
    now_in_app_naive_datetime,
    now_in_app_timezone,
)

__all__ = [
    "calendar_day",
    "get_app_timezone",
    "now_in_app_naive_datetime",
    "now_in_app_timezone",
]
