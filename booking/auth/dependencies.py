from fastapi import Depends, Request

from booking.auth.session_authority import SessionAuthority
from booking.core import config
from booking.dependencies import get_session_authority


def get_session_handle(request: Request) -> str | None:
    return request.cookies.get(config.SESSION_COOKIE_NAME)


def require_admin(
    handle: str | None = Depends(get_session_handle),
    authority: SessionAuthority = Depends(get_session_authority),
) -> str:
    authority.require_authenticated(handle)
    return handle
