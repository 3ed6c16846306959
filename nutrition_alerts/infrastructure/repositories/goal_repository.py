"""Read access to the ``user_goals`` table."""

from __future__ import annotations

from .supabase_repository import SupabaseRepository


class GoalRepository(SupabaseRepository):
    """Answer whether a user has configured any nutrition goal."""

    table = "user_goals"

    async def has_goals(self, user_id: str) -> bool:
        rows = await self._fetch(
            lambda query: query.select("id")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(1)
        )
        return bool(rows)


__all__ = ["GoalRepository"]
