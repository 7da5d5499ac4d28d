"""Administrator credential storage.

There is exactly one credential row. Passwords are hashed with bcrypt, which
salts every hash and spends ``rounds`` worth of work per comparison.
"""

import logging
from datetime import datetime
from typing import Callable

import bcrypt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from booking.core import config
from booking.core.errors import StorageError, ValidationError
from booking.core.timestamps import to_naive_utc, utc_now
from booking.models.admin_credential import SINGLETON_ID, AdminCredential

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = config.BCRYPT_ROUNDS) -> str:
    encoded = password.encode('utf-8')
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f'Password must be at most {MAX_PASSWORD_BYTES} bytes.')
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Over-long password or a stored hash that is not bcrypt.
        return False


class AdminCredentialStore:
    def __init__(
        self,
        session_factory: sessionmaker,
        rounds: int = config.BCRYPT_ROUNDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._session_factory = session_factory
        self._rounds = rounds
        self._clock = clock

    def _load_hash(self) -> str | None:
        db = self._session_factory()
        try:
            credential = db.get(AdminCredential, SINGLETON_ID)
            return credential.password_hash if credential else None
        except SQLAlchemyError as exc:
            raise StorageError('Administrator credentials could not be read.') from exc
        finally:
            db.close()

    def verify(self, password: str) -> bool:
        password_hash = self._load_hash()
        if not password_hash:
            return False
        return check_password(password, password_hash)

    def rotate(self, new_password: str) -> None:
        password_hash = hash_password(new_password, rounds=self._rounds)

        db = self._session_factory()
        try:
            credential = db.get(AdminCredential, SINGLETON_ID)
            if credential is None:
                credential = AdminCredential(id=SINGLETON_ID)
                db.add(credential)
            credential.password_hash = password_hash
            credential.updated_at = to_naive_utc(self._clock())
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError('Administrator credentials could not be saved.') from exc
        finally:
            db.close()

        logger.info('Administrator password rotated.')

    def ensure_initialized(self, default_password: str) -> bool:
        """Create the credential from ``default_password`` when none exists yet."""
        if self._load_hash():
            return False

        self.rotate(default_password)
        logger.warning('Administrator credential initialized from the configured default password.')
        return True
