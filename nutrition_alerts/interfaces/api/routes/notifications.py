"""Endpoints and websocket handler for in-app notifications."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Response, WebSocket, WebSocketDisconnect, status

from nutrition_alerts.application.notifications import (
    NotificationEngine,
    NotificationEngineRegistry,
    NotificationsState,
    badge_label,
    display_time,
    type_label,
)
from nutrition_alerts.domain.entities import Notification, SessionUser
from nutrition_alerts.infrastructure.notifications import (
    notification_manager,
    serialize_notification,
)
from nutrition_alerts.infrastructure.security import resolve_session_user
from nutrition_alerts.interfaces.api.dependencies import (
    get_current_user,
    get_engine_registry,
    get_notification_engine,
)
from nutrition_alerts.interfaces.api.schemas import (
    NotificationCreate,
    NotificationRead,
    NotificationsStateRead,
)
from nutrition_alerts.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification, now: datetime) -> NotificationRead:
    return NotificationRead(
        id=notification.id,
        message=notification.message,
        type=notification.type,
        type_label=type_label(notification.type),
        time=notification.time,
        is_read=notification.is_read,
        created_at=notification.created_at,
        display_time=display_time(notification.created_at, now),
    )


def _state_to_schema(state: NotificationsState) -> NotificationsStateRead:
    now = now_in_app_timezone()
    return NotificationsStateRead(
        notifications=[_notification_to_schema(n, now) for n in state.notifications],
        unread_count=state.unread_count,
        badge=badge_label(state.unread_count),
    )


@router.get("/", response_model=NotificationsStateRead)
async def list_notifications(
    engine: NotificationEngine = Depends(get_notification_engine),
) -> NotificationsStateRead:
    """Return the notification list, newest first, with the unread count."""

    return _state_to_schema(engine.state())


@router.post("/", response_model=NotificationsStateRead, status_code=status.HTTP_201_CREATED)
async def add_notification(
    payload: NotificationCreate,
    engine: NotificationEngine = Depends(get_notification_engine),
) -> NotificationsStateRead:
    """Add a notification; same-day duplicates are silently ignored."""

    return _state_to_schema(
        engine.add_notification(payload.message, payload.type, payload.time)
    )


@router.post("/refresh", response_model=NotificationsStateRead)
async def refresh_notifications(
    engine: NotificationEngine = Depends(get_notification_engine),
) -> NotificationsStateRead:
    return _state_to_schema(await engine.fetch_notifications())


@router.post("/read-all", response_model=NotificationsStateRead)
async def mark_all_notifications_read(
    engine: NotificationEngine = Depends(get_notification_engine),
) -> NotificationsStateRead:
    return _state_to_schema(engine.mark_all_as_read())


@router.post("/{notification_id}/read", response_model=NotificationsStateRead)
async def mark_notification_read(
    notification_id: str,
    engine: NotificationEngine = Depends(get_notification_engine),
) -> NotificationsStateRead:
    """Mark one notification as read; unknown ids leave the list unchanged."""

    return _state_to_schema(engine.mark_as_read(notification_id))


@router.post("/session/end", status_code=status.HTTP_204_NO_CONTENT)
async def end_notification_session(
    current_user: SessionUser = Depends(get_current_user),
    registry: NotificationEngineRegistry = Depends(get_engine_registry),
) -> Response:
    """Stop deriving notifications for the user until the next request."""

    await registry.sign_out(current_user.id)
    await notification_manager.close_user(current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams new notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    try:
        user = resolve_session_user(token)
    except ValueError:
        await websocket.close(code=1008)
        return

    registry: NotificationEngineRegistry = websocket.app.state.notification_engines
    engine = await registry.ensure_signed_in(user.id)

    await notification_manager.connect(user.id, websocket)
    try:
        await websocket.send_json(
            {
                "type": "init",
                "data": [serialize_notification(n) for n in engine.notifications],
                "unread_count": engine.unread_count,
            }
        )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list):
                    for notification_id in ids:
                        if isinstance(notification_id, str):
                            engine.mark_as_read(notification_id)
                await websocket.send_json(
                    {"type": "unread", "unread_count": engine.unread_count}
                )
                continue
    except WebSocketDisconnect:
        notification_manager.disconnect(user.id, websocket)
    except Exception:  # pragma: no cover - connection torn down unexpectedly
        notification_manager.disconnect(user.id, websocket)
        logger.exception("Notification websocket failed for user %s", user.id)
        raise
