from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from booking.auth.session_authority import SessionAuthority
from booking.database import Base, build_engine, build_session_factory
from booking.dependencies import get_appointment_service, get_session_authority
from booking.main import app
from booking.models.admin_credential import AdminCredential
from booking.repositories.appointment_repository import InMemoryAppointmentRepository
from booking.repositories.credential_store import AdminCredentialStore
from booking.services.appointment_service import AppointmentService

ADMIN_PASSWORD = 'garden-admin'


@pytest.fixture
def client(tmp_path):
    engine = build_engine(f'sqlite:///{tmp_path / "routes.db"}')
    Base.metadata.create_all(bind=engine, tables=[AdminCredential.__table__])
    credential_store = AdminCredentialStore(build_session_factory(engine), rounds=4)
    credential_store.ensure_initialized(ADMIN_PASSWORD)

    service = AppointmentService(InMemoryAppointmentRepository())
    authority = SessionAuthority(credential_store, lifetime=timedelta(hours=12))
    app.dependency_overrides[get_appointment_service] = lambda: service
    app.dependency_overrides[get_session_authority] = lambda: authority
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        engine.dispose()
