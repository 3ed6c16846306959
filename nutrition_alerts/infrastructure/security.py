"""Helpers for validating access tokens issued by Supabase auth."""

from jose import JWTError, jwt

from nutrition_alerts.config import get_settings
from nutrition_alerts.domain.entities import SessionUser

ALGORITHM = "HS256"
AUDIENCE = "authenticated"


def _jwt_secret() -> str:
    secret = get_settings().supabase_jwt_secret
    if not secret:
        raise ValueError("SUPABASE_JWT_SECRET is not configured")
    return secret


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, _jwt_secret(), algorithms=[ALGORITHM], audience=AUDIENCE)
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def resolve_session_user(token: str) -> SessionUser:
    """Return the user identified by ``token`` or raise ``ValueError``."""

    payload = decode_access_token(token)
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise ValueError("Token does not identify a user")
    email = payload.get("email")
    return SessionUser(id=subject, email=email if isinstance(email, str) else None)
