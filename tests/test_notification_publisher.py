"""Delivery of accepted notifications to websocket subscribers."""

from __future__ import annotations

import asyncio

import pytest

from nutrition_alerts.domain.entities import NotificationCandidate, NotificationType
from nutrition_alerts.infrastructure.notifications import NotificationPublisher

pytestmark = pytest.mark.anyio


class RecordingManager:
    def __init__(self) -> None:
        self.sent: list[tuple[str, dict]] = []

    async def send_to_user(self, user_id, message):
        self.sent.append((user_id, message))
        return 1


async def test_store_listener_pushes_accepted_notifications(store):
    manager = RecordingManager()
    publisher = NotificationPublisher(manager)
    store.subscribe(publisher.for_user("user-1"))

    store.add(NotificationCandidate(message="Log your snack", type=NotificationType.MEAL))
    store.add(NotificationCandidate(message="Log your snack", type=NotificationType.MEAL))
    assert publisher.pending == 1

    for _ in range(3):
        await asyncio.sleep(0)

    assert publisher.pending == 0
    assert len(manager.sent) == 1
    user_id, message = manager.sent[0]
    assert user_id == "user-1"
    assert message["type"] == "notification"
    assert message["data"]["message"] == "Log your snack"
    assert message["data"]["type"] == "meal"
    assert message["data"]["is_read"] is False


async def test_dispatch_without_user_is_ignored(store):
    manager = RecordingManager()
    publisher = NotificationPublisher(manager)
    notification = store.add(NotificationCandidate(message="Welcome", type=NotificationType.SYSTEM))

    publisher.dispatch("", notification)
    await asyncio.sleep(0)

    assert manager.sent == []
