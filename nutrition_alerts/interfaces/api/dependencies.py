"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from nutrition_alerts.application.notifications import (
    NotificationEngine,
    NotificationEngineRegistry,
)
from nutrition_alerts.domain.entities import SessionUser
from nutrition_alerts.infrastructure.security import resolve_session_user

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> SessionUser:
    """Return the user identified by the bearer token."""

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return resolve_session_user(credentials.credentials)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_engine_registry(request: Request) -> NotificationEngineRegistry:
    """Return the registry created by the application lifespan."""

    return request.app.state.notification_engines


async def get_notification_engine(
    current_user: SessionUser = Depends(get_current_user),
    registry: NotificationEngineRegistry = Depends(get_engine_registry),
) -> NotificationEngine:
    """Return the signed-in engine of the authenticated user."""

    return await registry.ensure_signed_in(current_user.id)
