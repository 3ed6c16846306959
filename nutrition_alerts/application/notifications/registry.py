"""Keep one notification engine per signed-in user."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .engine import NotificationEngine

logger = logging.getLogger(__name__)

EngineFactory = Callable[[str], NotificationEngine]


class NotificationEngineRegistry:
    """Create engines on first use and tear them down on shutdown."""

    def __init__(self, factory: EngineFactory) -> None:
        self._factory = factory
        self._engines: dict[str, NotificationEngine] = {}

    def get(self, user_id: str) -> NotificationEngine | None:
        return self._engines.get(user_id)

    async def ensure_signed_in(self, user_id: str) -> NotificationEngine:
        """Return the engine for ``user_id``, signing it in when needed."""

        engine = self._engines.get(user_id)
        if engine is None:
            engine = self._factory(user_id)
            self._engines[user_id] = engine
        if not engine.is_signed_in:
            await engine.sign_in(user_id)
        return engine

    async def sign_out(self, user_id: str) -> NotificationEngine | None:
        engine = self._engines.get(user_id)
        if engine is not None:
            await engine.sign_out()
        return engine

    async def close_all(self) -> None:
        engines = list(self._engines.values())
        self._engines.clear()
        for engine in engines:
            await engine.close()
        logger.debug("Closed %d notification engines", len(engines))


__all__ = ["EngineFactory", "NotificationEngineRegistry"]
