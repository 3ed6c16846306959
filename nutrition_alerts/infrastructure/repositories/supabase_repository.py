"""Shared plumbing for read-only Supabase table queries."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
from anyio import to_thread
from postgrest.exceptions import APIError
from supabase import Client

from nutrition_alerts.infrastructure.errors import StoreReadError
from nutrition_alerts.infrastructure.supabase_client import get_supabase_client

QueryBuilder = Callable[[Any], Any]


class SupabaseRepository:
    """Run PostgREST queries against ``table`` off the event loop.

    The supabase-py client is synchronous, so every query is executed in a
    worker thread and awaited by the caller.
    """

    table: str = ""

    def __init__(self, client_provider: Callable[[], Client] = get_supabase_client) -> None:
        self._client_provider = client_provider

    async def _fetch(self, build: QueryBuilder) -> list[dict[str, Any]]:
        return await to_thread.run_sync(self._fetch_sync, build)

    def _fetch_sync(self, build: QueryBuilder) -> list[dict[str, Any]]:
        client = self._client_provider()
        try:
            response = build(client.table(self.table)).execute()
        except (APIError, httpx.HTTPError) as exc:
            msg = f"Failed to query {self.table}: {exc}"
            raise StoreReadError(msg) from exc
        data = response.data if hasattr(response, "data") else None
        if data is None:
            return []
        if not isinstance(data, list):
            msg = f"Unexpected payload from {self.table}: {type(data).__name__}"
            raise StoreReadError(msg)
        return data


__all__ = ["SupabaseRepository"]
