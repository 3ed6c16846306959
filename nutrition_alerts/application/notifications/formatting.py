"""Display helpers mirroring how the notification bell renders entries."""

from __future__ import annotations

from datetime import datetime, timedelta

from nutrition_alerts.domain.entities import NotificationType
from nutrition_alerts.utils import calendar_day

_TYPE_LABELS = {
    NotificationType.GOAL: "Goal Reminder",
    NotificationType.MEAL: "Meal Log",
}

MAX_BADGE_COUNT = 9


def type_label(notification_type: NotificationType) -> str:
    return _TYPE_LABELS.get(notification_type, "System")


def _clock_time(value: datetime) -> str:
    return value.strftime("%I:%M %p").lstrip("0")


def display_time(created_at: datetime, now: datetime) -> str:
    """Return ``Today, 8:05 AM``, ``Yesterday, 8:05 AM`` or ``May 1, 8:05 AM``."""

    local = created_at.astimezone(now.tzinfo) if created_at.tzinfo and now.tzinfo else created_at
    day = calendar_day(created_at, now)
    today = now.date()
    if day == today:
        return f"Today, {_clock_time(local)}"
    if day == today - timedelta(days=1):
        return f"Yesterday, {_clock_time(local)}"
    return f"{local.strftime('%b')} {local.day}, {_clock_time(local)}"


def badge_label(unread_count: int) -> str:
    """Return the unread badge text; empty when there is nothing unread."""

    if unread_count <= 0:
        return ""
    if unread_count > MAX_BADGE_COUNT:
        return f"{MAX_BADGE_COUNT}+"
    return str(unread_count)


__all__ = ["badge_label", "display_time", "type_label"]
