"""Domain entity for the signed-in user."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionUser:
    """Identity resolved from an access token issued by the auth provider."""

    id: str
    email: str | None = None


__all__ = ["SessionUser"]
