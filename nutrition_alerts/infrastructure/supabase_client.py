"""Supabase client initialization."""

from __future__ import annotations

import logging
from functools import lru_cache

from supabase import Client, create_client

from nutrition_alerts.config import get_settings
from nutrition_alerts.infrastructure.errors import StoreReadError

logger = logging.getLogger(__name__)


class SupabaseConfigurationError(StoreReadError):
    """Raised when the Supabase credentials are missing."""


@lru_cache
def get_supabase_client() -> Client:
    """Return the shared Supabase client built from the configured credentials."""

    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        raise SupabaseConfigurationError(
            "Supabase credentials not found; set SUPABASE_URL and SUPABASE_KEY"
        )
    client = create_client(settings.supabase_url, settings.supabase_key)
    logger.info("Supabase client connected to %s", settings.supabase_url)
    return client


__all__ = ["SupabaseConfigurationError", "get_supabase_client"]
