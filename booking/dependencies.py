"""Process-wide components, handed to endpoints through FastAPI dependencies.

Tests replace these with ``app.dependency_overrides``.
"""

from datetime import timedelta
from functools import lru_cache

from booking.auth.session_authority import SessionAuthority
from booking.core import config
from booking.database import SessionLocal
from booking.repositories.appointment_repository import SqlAppointmentRepository
from booking.repositories.credential_store import AdminCredentialStore
from booking.services.appointment_service import AppointmentService


@lru_cache
def get_appointment_service() -> AppointmentService:
    return AppointmentService(SqlAppointmentRepository(SessionLocal))


@lru_cache
def get_credential_store() -> AdminCredentialStore:
    return AdminCredentialStore(SessionLocal, rounds=config.BCRYPT_ROUNDS)


@lru_cache
def get_session_authority() -> SessionAuthority:
    return SessionAuthority(
        get_credential_store(),
        lifetime=timedelta(hours=config.SESSION_LIFETIME_HOURS),
        invalidate_on_password_change=config.INVALIDATE_SESSIONS_ON_PASSWORD_CHANGE,
    )
