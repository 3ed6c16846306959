"""In-memory notification list with deduplication and best-effort persistence."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from nutrition_alerts.domain.entities import (
    Notification,
    NotificationCandidate,
    NotificationType,
)
from nutrition_alerts.infrastructure.errors import LocalStorageError
from nutrition_alerts.infrastructure.repositories import KeyValueStore
from nutrition_alerts.utils import calendar_day, now_in_app_timezone

logger = logging.getLogger(__name__)

STORAGE_KEY = "userNotifications"
GENERATED_ID_PREFIX = "notification-"

NotificationListener = Callable[[Notification], None]


class StoredNotification(BaseModel):
    """Cached representation, keyed the way browser clients wrote it."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    message: str
    type: NotificationType
    time: str | None = None
    is_read: bool = Field(default=False, alias="isRead")
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_entity(cls, notification: Notification) -> "StoredNotification":
        return cls(
            id=notification.id,
            message=notification.message,
            type=notification.type,
            time=notification.time,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )

    def to_entity(self) -> Notification:
        return Notification(
            id=self.id,
            message=self.message,
            type=self.type,
            time=self.time,
            is_read=self.is_read,
            created_at=self.created_at,
        )


_stored_list = TypeAdapter(list[StoredNotification])


class NotificationStore:
    """Authoritative, newest-first list of notifications for one client.

    Every accepted mutation is flushed to ``storage``; write failures are
    logged and the in-memory list stays authoritative.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        *,
        clock: Callable[[], datetime] = now_in_app_timezone,
        storage_key: str = STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._storage_key = storage_key
        self._items: list[Notification] = []
        self._listeners: list[NotificationListener] = []

    def load(self) -> int:
        """Merge the cached list into memory and return how many entries were restored."""

        try:
            raw = self._storage.get(self._storage_key)
        except LocalStorageError:
            logger.exception("Could not read cached notifications")
            return 0
        if not raw:
            return 0

        try:
            cached = _stored_list.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Discarding corrupt notification cache (%d errors)", exc.error_count()
            )
            self._discard_cache()
            return 0

        known = {notification.id for notification in self._items}
        restored: list[Notification] = []
        for entry in cached:
            if entry.id in known:
                continue
            known.add(entry.id)
            restored.append(entry.to_entity())
        self._items.extend(restored)
        return len(restored)

    def get_all(self) -> Sequence[Notification]:
        return tuple(self._items)

    def get_unread_count(self) -> int:
        return sum(1 for notification in self._items if not notification.is_read)

    def has_id(self, notification_id: str) -> bool:
        return any(notification.id == notification_id for notification in self._items)

    def has_type_on(self, notification_type: NotificationType, day: date) -> bool:
        """Return whether a notification of ``notification_type`` was created on ``day``."""

        reference = self._clock()
        return any(
            notification.type == notification_type
            and calendar_day(notification.created_at, reference) == day
            for notification in self._items
        )

    def add(self, candidate: NotificationCandidate) -> Notification | None:
        """Accept ``candidate`` unless it duplicates an existing notification.

        Candidates with an explicit id are only checked against ids. Without
        one, a candidate is compared with the other entries that also got a
        generated id: a ``goal`` candidate is rejected when such a goal
        notification exists for today and a ``meal`` candidate when the same
        message was already created today. Returns the stored notification, or ``None`` when the
        candidate was rejected.
        """

        now = self._clock()
        if candidate.id is not None:
            if self.has_id(candidate.id):
                logger.debug("Skipping notification %s: id already present", candidate.id)
                return None
            notification_id = candidate.id
        else:
            if self._is_same_day_duplicate(candidate, now):
                logger.debug(
                    "Skipping %s notification already sent today: %s",
                    candidate.type.value,
                    candidate.message,
                )
                return None
            notification_id = self._generate_id(now)

        notification = Notification(
            id=notification_id,
            message=candidate.message,
            type=candidate.type,
            created_at=now,
            time=candidate.time,
        )
        self._items.insert(0, notification)
        self.persist()
        self._notify(notification)
        return notification

    def mark_as_read(self, notification_id: str) -> bool:
        for notification in self._items:
            if notification.id == notification_id:
                if notification.is_read:
                    return False
                notification.is_read = True
                self.persist()
                return True
        return False

    def mark_all_as_read(self) -> int:
        changed = 0
        for notification in self._items:
            if not notification.is_read:
                notification.is_read = True
                changed += 1
        if changed:
            self.persist()
        return changed

    def persist(self) -> None:
        payload = _stored_list.dump_json(
            [StoredNotification.from_entity(n) for n in self._items], by_alias=True
        ).decode()
        try:
            self._storage.set(self._storage_key, payload)
        except LocalStorageError:
            logger.exception("Could not persist %d notifications", len(self._items))

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        """Register ``listener`` for accepted notifications; returns an unsubscribe hook."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def _is_same_day_duplicate(self, candidate: NotificationCandidate, now: datetime) -> bool:
        if candidate.type not in (NotificationType.GOAL, NotificationType.MEAL):
            return False
        # Entries stored under an explicit id are deduplicated by that id only.
        today = now.date()
        return any(
            notification.type == candidate.type
            and notification.id.startswith(GENERATED_ID_PREFIX)
            and (
                candidate.type == NotificationType.GOAL
                or notification.message == candidate.message
            )
            and calendar_day(notification.created_at, now) == today
            for notification in self._items
        )

    def _generate_id(self, now: datetime) -> str:
        base = f"{GENERATED_ID_PREFIX}{int(now.timestamp() * 1000)}"
        notification_id = base
        suffix = 1
        while self.has_id(notification_id):
            notification_id = f"{base}-{suffix}"
            suffix += 1
        return notification_id

    def _notify(self, notification: Notification) -> None:
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception:
                logger.exception("Notification listener failed for %s", notification.id)

    def _discard_cache(self) -> None:
        try:
            self._storage.remove(self._storage_key)
        except LocalStorageError:
            logger.exception("Could not remove corrupt notification cache")


__all__ = ["NotificationStore", "StoredNotification", "STORAGE_KEY"]
