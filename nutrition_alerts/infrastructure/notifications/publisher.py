"""Push accepted notifications to the user's open websockets."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from anyio import from_thread

from nutrition_alerts.domain.entities import Notification

from .manager import NotificationConnectionManager, notification_manager

def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "message": notification.message,
        "type": notification.type.value,
        "time": notification.time,
        "is_read": notification.is_read,
        "created_at": notification.created_at.isoformat(),
    }

class NotificationPublisher:
    """Turn store events into ``notification`` websocket messages.

    Listeners run synchronously inside the store, so delivery is scheduled on
    the running event loop, or through the anyio portal when called from a
    worker thread.
    """

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager
        self._pending: set[asyncio.Task[int]] = set()

    def dispatch(self, user_id: str, notification: Notification) -> None:
        if not user_id:
            return
        message = {"type": "notification", "data": serialize_notification(notification)}
        self._schedule(user_id, message)

    def for_user(self, user_id: str) -> Callable[[Notification], None]:
        """Return a store listener that publishes to ``user_id``."""

        def listener(notification: Notification) -> None:
            self.dispatch(user_id, notification)

        return listener

    def _schedule(self, user_id: str, message: dict[str, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            from_thread.run(self._manager.send_to_user, user_id, message)
        else:
            task = loop.create_task(self._manager.send_to_user(user_id, message))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    @property
    def pending(self) -> int:
        return len(self._pending)


notification_publisher = NotificationPublisher(notification_manager)


__all__ = [
    "NotificationPublisher",
    "notification_publisher",
    "serialize_notification",
]
