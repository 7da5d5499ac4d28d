from datetime import datetime, timezone

import pytest

from booking.core.errors import StorageError, ValidationError
from booking.database import Base, build_engine, build_session_factory
from booking.models.admin_credential import SINGLETON_ID, AdminCredential
from booking.repositories.credential_store import AdminCredentialStore

ROTATED_AT = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f'sqlite:///{tmp_path / "credentials.db"}')
    Base.metadata.create_all(bind=engine, tables=[AdminCredential.__table__])
    try:
        yield build_session_factory(engine)
    finally:
        engine.dispose()


@pytest.fixture
def store(session_factory) -> AdminCredentialStore:
    return AdminCredentialStore(session_factory, rounds=4, clock=lambda: ROTATED_AT)


def _stored_credential(session_factory) -> AdminCredential | None:
    db = session_factory()
    try:
        return db.get(AdminCredential, SINGLETON_ID)
    finally:
        db.close()


def test_verify_is_false_when_no_credential_exists(store: AdminCredentialStore) -> None:
    assert store.verify('garden-admin') is False


def test_ensure_initialized_creates_credential_once(store: AdminCredentialStore, session_factory) -> None:
    assert store.ensure_initialized('garden-admin') is True
    assert store.ensure_initialized('something-else') is False

    assert store.verify('garden-admin') is True
    assert store.verify('something-else') is False
    credential = _stored_credential(session_factory)
    assert credential.updated_at == ROTATED_AT.replace(tzinfo=None)


def test_stored_hash_is_salted_bcrypt(store: AdminCredentialStore, session_factory) -> None:
    store.rotate('garden-admin')
    first_hash = _stored_credential(session_factory).password_hash
    store.rotate('garden-admin')
    second_hash = _stored_credential(session_factory).password_hash

    assert first_hash.startswith('$2b$04$')
    assert 'garden-admin' not in first_hash
    assert first_hash != second_hash


def test_rotate_replaces_previous_password(store: AdminCredentialStore) -> None:
    store.ensure_initialized('garden-admin')

    store.rotate('a-much-better-password')

    assert store.verify('garden-admin') is False
    assert store.verify('a-much-better-password') is True


def test_verify_returns_false_for_unusable_hash(store: AdminCredentialStore, session_factory) -> None:
    db = session_factory()
    db.add(AdminCredential(id=SINGLETON_ID, password_hash='not-a-bcrypt-hash', updated_at=datetime(2024, 1, 1)))
    db.commit()
    db.close()

    assert store.verify('garden-admin') is False


def test_rotate_rejects_password_longer_than_bcrypt_limit(store: AdminCredentialStore) -> None:
    with pytest.raises(ValidationError):
        store.rotate('x' * 73)


def test_verify_raises_storage_error_when_table_missing(tmp_path) -> None:
    engine = build_engine(f'sqlite:///{tmp_path / "missing.db"}')
    store = AdminCredentialStore(build_session_factory(engine), rounds=4)

    with pytest.raises(StorageError):
        store.verify('garden-admin')
