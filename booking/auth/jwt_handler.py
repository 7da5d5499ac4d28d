from datetime import datetime, timedelta, timezone

import jwt

from booking.core import config

SESSION_TOKEN_TYPE = "admin-session"


def create_session_token(session_id: str, expires_hours: int | None = None) -> str:
    expire_hours = expires_hours or config.SESSION_LIFETIME_HOURS
    expire = datetime.now(timezone.utc) + timedelta(hours=expire_hours)
    payload = {"sid": session_id, "typ": SESSION_TOKEN_TYPE, "exp": expire}
    return jwt.encode(payload, config.SESSION_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_session_token(token: str) -> dict:
    return jwt.decode(token, config.SESSION_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def session_id_from_token(token: str | None) -> str | None:
    if not token:
        return None
    try:
        payload = decode_session_token(token)
    except jwt.InvalidTokenError:
        return None
    if payload.get("typ") != SESSION_TOKEN_TYPE:
        return None
    return payload.get("sid")
