"""Open notification websockets, grouped by signed-in user."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Track the bell sockets a user has open across tabs and devices."""

    def __init__(self) -> None:
        self._sockets: dict[str, list[WebSocket]] = {}

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self._sockets.setdefault(user_id, []).append(websocket)
        logger.debug(
            "Notification socket opened for %s (%d open)", user_id, self.count(user_id)
        )

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        sockets = self._sockets.get(user_id, [])
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets:
            self._sockets.pop(user_id, None)

    def count(self, user_id: str) -> int:
        return len(self._sockets.get(user_id, []))

    async def send_to_user(self, user_id: str, message: dict[str, Any]) -> int:
        """Send ``message`` to the user's sockets and return how many received it.

        Sockets that fail to send are dropped from the pool.
        """

        delivered = 0
        for websocket in list(self._sockets.get(user_id, [])):
            try:
                await websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                logger.debug("Dropping stale notification socket for %s: %s", user_id, exc)
                self.disconnect(user_id, websocket)
            else:
                delivered += 1
        return delivered

    async def close_user(self, user_id: str, code: int = 1000) -> None:
        """Close every socket of ``user_id``, used when the session ends."""

        for websocket in self._sockets.pop(user_id, []):
            try:
                await websocket.close(code=code)
            except (RuntimeError, OSError):
                logger.debug("Notification socket for %s was already closed", user_id)


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
