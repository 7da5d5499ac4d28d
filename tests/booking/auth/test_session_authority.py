from datetime import datetime, timedelta, timezone

import pytest

from booking.auth import jwt_handler
from booking.auth.session_authority import SessionAuthority, SessionStatus
from booking.core.errors import InvalidCredentials, Unauthorized, ValidationError


class _FakeCredentialStore:
    def __init__(self, password: str | None = 'garden-admin'):
        self.password = password
        self.rotations: list[str] = []

    def verify(self, password: str) -> bool:
        return self.password is not None and password == self.password

    def rotate(self, new_password: str) -> None:
        self.password = new_password
        self.rotations.append(new_password)


class _Clock:
    def __init__(self):
        self.now = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def credentials() -> _FakeCredentialStore:
    return _FakeCredentialStore()


@pytest.fixture
def clock() -> _Clock:
    return _Clock()


@pytest.fixture
def authority(credentials, clock) -> SessionAuthority:
    return SessionAuthority(credentials, lifetime=timedelta(hours=12), clock=clock)


def test_login_with_correct_password_authenticates(authority: SessionAuthority) -> None:
    handle = authority.login('garden-admin')

    assert authority.current_status(handle) is SessionStatus.AUTHENTICATED
    assert authority.is_authenticated(handle) is True


def test_login_with_wrong_password_creates_no_session(authority: SessionAuthority) -> None:
    with pytest.raises(InvalidCredentials):
        authority.login('wrong-password')

    assert authority.active_session_count() == 0


@pytest.mark.parametrize('password', [None, '', '   ', 1234])
def test_login_requires_password(authority: SessionAuthority, password) -> None:
    with pytest.raises(ValidationError) as exception_info:
        authority.login(password)

    assert exception_info.value.message == 'Password is required.'


@pytest.mark.parametrize('handle', [None, '', 'not-a-token'])
def test_unknown_handles_are_anonymous(authority: SessionAuthority, handle) -> None:
    assert authority.current_status(handle) is SessionStatus.ANONYMOUS


def test_handle_signed_with_other_key_is_anonymous(authority: SessionAuthority, monkeypatch) -> None:
    monkeypatch.setattr(jwt_handler.config, 'SESSION_SECRET_KEY', 'another-secret-key-0123456789abcdefghij')
    forged = jwt_handler.create_session_token('forged-session')
    monkeypatch.undo()

    assert authority.current_status(forged) is SessionStatus.ANONYMOUS


def test_session_expires_after_lifetime(authority: SessionAuthority, clock: _Clock) -> None:
    handle = authority.login('garden-admin')

    clock.advance(hours=11, minutes=59)
    assert authority.is_authenticated(handle) is True

    clock.advance(minutes=1)
    assert authority.current_status(handle) is SessionStatus.ANONYMOUS
    assert authority.active_session_count() == 0


def test_sweep_expired_removes_only_stale_sessions(authority: SessionAuthority, clock: _Clock) -> None:
    authority.login('garden-admin')
    clock.advance(hours=6)
    fresh = authority.login('garden-admin')
    clock.advance(hours=7)

    assert authority.sweep_expired() == 1
    assert authority.active_session_count() == 1
    assert authority.is_authenticated(fresh) is True


def test_logout_invalidates_session_and_is_idempotent(authority: SessionAuthority) -> None:
    handle = authority.login('garden-admin')

    authority.logout(handle)
    authority.logout(handle)
    authority.logout(None)

    assert authority.current_status(handle) is SessionStatus.ANONYMOUS


def test_require_authenticated_raises_for_anonymous(authority: SessionAuthority) -> None:
    with pytest.raises(Unauthorized):
        authority.require_authenticated(None)


def test_change_password_rotates_credential(authority: SessionAuthority, credentials) -> None:
    handle = authority.login('garden-admin')

    authority.change_password(handle, 'garden-admin', '  new-password-123  ')

    assert credentials.rotations == ['new-password-123']
    with pytest.raises(InvalidCredentials):
        authority.login('garden-admin')
    assert authority.is_authenticated(authority.login('new-password-123'))


def test_change_password_requires_session(authority: SessionAuthority, credentials) -> None:
    with pytest.raises(Unauthorized):
        authority.change_password(None, 'garden-admin', 'new-password-123')

    assert credentials.rotations == []


@pytest.mark.parametrize('new_password', [None, '', 'short', '  1234567  '])
def test_change_password_rejects_short_password(authority: SessionAuthority, credentials, new_password) -> None:
    handle = authority.login('garden-admin')

    with pytest.raises(ValidationError):
        authority.change_password(handle, 'garden-admin', new_password)

    assert credentials.rotations == []


def test_change_password_rejects_password_over_bcrypt_limit(authority: SessionAuthority, credentials) -> None:
    handle = authority.login('garden-admin')

    with pytest.raises(ValidationError):
        authority.change_password(handle, 'garden-admin', 'p' * 73)

    assert credentials.rotations == []


def test_change_password_requires_current_password(authority: SessionAuthority, credentials) -> None:
    handle = authority.login('garden-admin')

    with pytest.raises(InvalidCredentials) as exception_info:
        authority.change_password(handle, 'not-it', 'new-password-123')

    assert exception_info.value.message == 'Current password is incorrect.'
    assert credentials.rotations == []


def test_change_password_revokes_other_sessions(authority: SessionAuthority) -> None:
    current = authority.login('garden-admin')
    other = authority.login('garden-admin')

    authority.change_password(current, 'garden-admin', 'new-password-123')

    assert authority.is_authenticated(current) is True
    assert authority.is_authenticated(other) is False


def test_change_password_can_keep_other_sessions(credentials, clock) -> None:
    authority = SessionAuthority(credentials, clock=clock, invalidate_on_password_change=False)
    current = authority.login('garden-admin')
    other = authority.login('garden-admin')

    authority.change_password(current, 'garden-admin', 'new-password-123')

    assert authority.is_authenticated(other) is True
