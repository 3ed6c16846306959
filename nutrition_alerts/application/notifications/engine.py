"""Service object that owns a user's notifications and their refresh schedule."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from nutrition_alerts.domain.entities import (
    Notification,
    NotificationCandidate,
    NotificationType,
)
from nutrition_alerts.utils import now_in_app_timezone

from .derivation import DerivationEngine, SessionCheck
from .goal_check import RemoteGoalCheck
from .store import NotificationListener, NotificationStore

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = timedelta(minutes=30)


@dataclass(frozen=True)
class NotificationsState:
    """Snapshot returned to callers after every read or mutation."""

    notifications: tuple[Notification, ...]
    unread_count: int


class NotificationEngine:
    """Expose the notification list of one client and keep it fresh.

    The engine is inert until :meth:`sign_in` is awaited; from then on it runs
    a derivation pass immediately and every ``refresh_interval`` until
    :meth:`sign_out` or :meth:`close`.
    """

    def __init__(
        self,
        store: NotificationStore,
        derivation: DerivationEngine,
        goal_check: RemoteGoalCheck,
        *,
        refresh_interval: timedelta = DEFAULT_REFRESH_INTERVAL,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._store = store
        self._derivation = derivation
        self._goal_check = goal_check
        self._refresh_interval = refresh_interval
        self._clock = clock
        self._user_id: str | None = None
        self._task: asyncio.Task[None] | None = None
        self._session = 0

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def is_signed_in(self) -> bool:
        return self._user_id is not None

    @property
    def notifications(self) -> Sequence[Notification]:
        return self._store.get_all()

    @property
    def unread_count(self) -> int:
        return self._store.get_unread_count()

    def state(self) -> NotificationsState:
        return NotificationsState(
            notifications=tuple(self._store.get_all()),
            unread_count=self._store.get_unread_count(),
        )

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        return self._store.subscribe(listener)

    def mark_as_read(self, notification_id: str) -> NotificationsState:
        self._store.mark_as_read(notification_id)
        return self.state()

    def mark_all_as_read(self) -> NotificationsState:
        self._store.mark_all_as_read()
        return self.state()

    def add_notification(
        self,
        message: str,
        notification_type: NotificationType = NotificationType.SYSTEM,
        time: str | None = None,
    ) -> NotificationsState:
        self._store.add(
            NotificationCandidate(message=message, type=notification_type, time=time)
        )
        return self.state()

    async def fetch_notifications(self) -> NotificationsState:
        """Run the on-demand goal check; safe to call repeatedly."""

        user_id = self._user_id
        if user_id is not None:
            await self._goal_check.run(user_id, self._clock(), self._session_check(user_id))
        return self.state()

    async def run_derivation_pass(self) -> list[Notification]:
        user_id = self._user_id
        if user_id is None:
            return []
        return await self._derivation.run_pass(
            user_id, self._clock(), self._session_check(user_id)
        )

    async def sign_in(self, user_id: str) -> None:
        """Start deriving notifications for ``user_id``.

        A sign-out (or another sign-in) that lands while the immediate pass is
        still reading leaves the refresh schedule to the later call.
        """

        if self._user_id == user_id and self._task is not None:
            return
        if self._user_id is not None:
            await self.sign_out()

        self._session += 1
        session = self._session
        self._user_id = user_id
        logger.info("Notification engine started for user %s", user_id)
        await self._run_pass_safely()
        if self._session == session and self._task is None:
            self._task = asyncio.create_task(self._refresh_periodically(session))

    async def sign_out(self) -> None:
        """Suspend derivation; notifications stay in memory and in the cache."""

        user_id = self._user_id
        self._user_id = None
        self._session += 1
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if user_id is not None:
            logger.info("Notification engine stopped for user %s", user_id)

    async def close(self) -> None:
        await self.sign_out()
        self._store.clear_listeners()

    def _session_check(self, user_id: str) -> SessionCheck:
        return lambda: self._user_id == user_id

    async def _refresh_periodically(self, session: int) -> None:
        interval = self._refresh_interval.total_seconds()
        while self._session == session:
            await asyncio.sleep(interval)
            await self._run_pass_safely()

    async def _run_pass_safely(self) -> None:
        try:
            await self.run_derivation_pass()
        except Exception:
            logger.exception("Notification derivation pass failed for %s", self._user_id)


__all__ = ["DEFAULT_REFRESH_INTERVAL", "NotificationEngine", "NotificationsState"]
