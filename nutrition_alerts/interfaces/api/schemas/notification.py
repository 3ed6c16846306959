"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from nutrition_alerts.domain.entities import NotificationType


class NotificationCreate(BaseModel):
    """Payload used to add a notification outside the derivation rules."""

    message: str = Field(..., min_length=1, max_length=500)
    type: NotificationType = NotificationType.SYSTEM
    time: str | None = Field(default=None, max_length=40, description="Advisory due time")


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    message: str
    type: NotificationType
    type_label: str
    time: str | None = None
    is_read: bool
    created_at: datetime
    display_time: str


class NotificationsStateRead(BaseModel):
    """Full notification list together with the derived unread counters."""

    notifications: list[NotificationRead] = Field(default_factory=list)
    unread_count: int = 0
    badge: str = ""


__all__ = ["NotificationCreate", "NotificationRead", "NotificationsStateRead"]
