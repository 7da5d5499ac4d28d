from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from booking.auth.dependencies import get_session_handle, require_admin
from booking.auth.session_authority import SessionAuthority
from booking.core import config
from booking.dependencies import get_session_authority

router = APIRouter(tags=['admin'])


class LoginRequest(BaseModel):
    password: str | None = None


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_password: str | None = None
    new_password: str | None = None


def set_session_cookie(response: Response, handle: str) -> None:
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=handle,
        max_age=config.SESSION_LIFETIME_HOURS * 60 * 60,
        httponly=True,
        samesite='lax',
        secure=config.SESSION_COOKIE_SECURE,
    )


@router.get('/me')
def me(
    handle: str | None = Depends(get_session_handle),
    authority: SessionAuthority = Depends(get_session_authority),
):
    return {'authenticated': authority.is_authenticated(handle)}


@router.post('/login')
def login(
    payload: LoginRequest,
    response: Response,
    authority: SessionAuthority = Depends(get_session_authority),
):
    handle = authority.login(payload.password)
    set_session_cookie(response, handle)
    return {'authenticated': True}


@router.post('/logout', status_code=status.HTTP_204_NO_CONTENT)
def logout(
    handle: str | None = Depends(get_session_handle),
    authority: SessionAuthority = Depends(get_session_authority),
):
    authority.logout(handle)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(
        key=config.SESSION_COOKIE_NAME,
        httponly=True,
        samesite='lax',
        secure=config.SESSION_COOKIE_SECURE,
    )
    return response


@router.post('/password')
def change_password(
    payload: ChangePasswordRequest,
    handle: str = Depends(require_admin),
    authority: SessionAuthority = Depends(get_session_authority),
):
    authority.change_password(handle, payload.current_password, payload.new_password)
    return {'success': True}
