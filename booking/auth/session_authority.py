"""Administrator sessions.

Sessions live in process memory only. The cookie carries a signed handle that
names a session; the session table decides whether that handle is still good,
so logout and expiry take effect immediately.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from threading import Lock
from typing import Callable, Protocol

from booking.auth import jwt_handler
from booking.core import config
from booking.core.errors import InvalidCredentials, Unauthorized, ValidationError
from booking.core.timestamps import utc_now
from booking.repositories.credential_store import MAX_PASSWORD_BYTES

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def verify(self, password: str) -> bool:
        ...

    def rotate(self, new_password: str) -> None:
        ...


class SessionStatus(str, Enum):
    ANONYMOUS = 'anonymous'
    AUTHENTICATED = 'authenticated'


@dataclass(frozen=True)
class AdminSession:
    session_id: str
    created_at: datetime
    is_admin: bool = True


class SessionAuthority:
    def __init__(
        self,
        credential_store: CredentialStore,
        lifetime: timedelta = timedelta(hours=config.SESSION_LIFETIME_HOURS),
        clock: Callable[[], datetime] = utc_now,
        invalidate_on_password_change: bool = config.INVALIDATE_SESSIONS_ON_PASSWORD_CHANGE,
    ):
        self._credential_store = credential_store
        self._lifetime = lifetime
        self._clock = clock
        self._invalidate_on_password_change = invalidate_on_password_change
        self._sessions: dict[str, AdminSession] = {}
        self._lock = Lock()

    def _is_expired(self, session: AdminSession, now: datetime) -> bool:
        return now >= session.created_at + self._lifetime

    def _sweep_locked(self, now: datetime) -> int:
        expired = [session_id for session_id, session in self._sessions.items() if self._is_expired(session, now)]
        for session_id in expired:
            del self._sessions[session_id]
        return len(expired)

    def _live_session(self, handle: str | None) -> AdminSession | None:
        session_id = jwt_handler.session_id_from_token(handle)
        if session_id is None:
            return None

        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if self._is_expired(session, now):
                del self._sessions[session_id]
                return None
            return session

    def login(self, password: str | None) -> str:
        if not isinstance(password, str) or not password.strip():
            raise ValidationError('Password is required.')

        if not self._credential_store.verify(password):
            logger.warning('Rejected administrator login attempt.')
            raise InvalidCredentials('Incorrect password.')

        now = self._clock()
        session = AdminSession(session_id=uuid.uuid4().hex, created_at=now)
        with self._lock:
            self._sweep_locked(now)
            self._sessions[session.session_id] = session

        logger.info('Administrator logged in (session %s).', session.session_id[:8])
        hours = max(1, int(self._lifetime.total_seconds() // 3600))
        return jwt_handler.create_session_token(session.session_id, expires_hours=hours)

    def current_status(self, handle: str | None) -> SessionStatus:
        session = self._live_session(handle)
        if session is None or not session.is_admin:
            return SessionStatus.ANONYMOUS
        return SessionStatus.AUTHENTICATED

    def is_authenticated(self, handle: str | None) -> bool:
        return self.current_status(handle) is SessionStatus.AUTHENTICATED

    def require_authenticated(self, handle: str | None) -> None:
        if not self.is_authenticated(handle):
            raise Unauthorized('Unauthorized')

    def logout(self, handle: str | None) -> None:
        session_id = jwt_handler.session_id_from_token(handle)
        if session_id is None:
            return

        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is not None:
            logger.info('Administrator logged out (session %s).', session_id[:8])

    def change_password(self, handle: str | None, current_password: str | None, new_password: str | None) -> None:
        session = self._live_session(handle)
        if session is None:
            raise Unauthorized('Unauthorized')

        normalized = new_password.strip() if isinstance(new_password, str) else ''
        if len(normalized) < config.MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f'New password must be at least {config.MIN_PASSWORD_LENGTH} characters long.'
            )
        if len(normalized.encode('utf-8')) > MAX_PASSWORD_BYTES:
            raise ValidationError(f'New password must be at most {MAX_PASSWORD_BYTES} bytes.')

        if not self._credential_store.verify(current_password or ''):
            raise InvalidCredentials('Current password is incorrect.')

        self._credential_store.rotate(normalized)

        if self._invalidate_on_password_change:
            with self._lock:
                revoked = [session_id for session_id in self._sessions if session_id != session.session_id]
                for session_id in revoked:
                    del self._sessions[session_id]
            if revoked:
                logger.info('Revoked %d other administrator session(s) after password change.', len(revoked))

    def sweep_expired(self) -> int:
        with self._lock:
            return self._sweep_locked(self._clock())

    def active_session_count(self) -> int:
        with self._lock:
            return len(self._sessions)
