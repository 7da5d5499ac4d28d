"""Durable storage for the appointment collection.

The repository hands out immutable snapshots and accepts a whole new
collection on write. Callers decide what changes; the repository only makes
sure a write lands in one step.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from threading import Lock
from typing import Iterable, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from booking.core.errors import StorageError
from booking.core.timestamps import ensure_utc, to_naive_utc
from booking.models.appointment import Appointment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppointmentRecord:
    id: str
    start: datetime
    end: datetime
    summary: str = ''
    description: str = ''
    customer_name: str = ''
    customer_email: str = ''
    customer_phone: str = ''
    customer_notes: str = ''
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AppointmentRepository(Protocol):
    def load_snapshot(self) -> list[AppointmentRecord]:
        ...

    def replace_all(self, appointments: Iterable[AppointmentRecord]) -> None:
        ...


def _sorted(appointments: Iterable[AppointmentRecord]) -> list[AppointmentRecord]:
    return sorted(appointments, key=lambda appointment: (appointment.start, appointment.id))


def _to_record(row: Appointment) -> AppointmentRecord:
    return AppointmentRecord(
        id=row.id,
        start=ensure_utc(row.start_time),
        end=ensure_utc(row.end_time),
        summary=row.summary or '',
        description=row.description or '',
        customer_name=row.customer_name or '',
        customer_email=row.customer_email or '',
        customer_phone=row.customer_phone or '',
        customer_notes=row.customer_notes or '',
        created_at=ensure_utc(row.created_at) if row.created_at else None,
        updated_at=ensure_utc(row.updated_at) if row.updated_at else None,
    )


def _apply(row: Appointment, record: AppointmentRecord) -> Appointment:
    row.start_time = to_naive_utc(record.start)
    row.end_time = to_naive_utc(record.end)
    row.summary = record.summary
    row.description = record.description
    row.customer_name = record.customer_name
    row.customer_email = record.customer_email
    row.customer_phone = record.customer_phone
    row.customer_notes = record.customer_notes
    row.created_at = to_naive_utc(record.created_at) if record.created_at else None
    row.updated_at = to_naive_utc(record.updated_at) if record.updated_at else None
    return row


class SqlAppointmentRepository:
    """Appointment collection stored in the ``appointments`` table."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def load_snapshot(self) -> list[AppointmentRecord]:
        db = self._session_factory()
        try:
            rows = db.query(Appointment).order_by(Appointment.start_time.asc(), Appointment.id.asc()).all()
            return [_to_record(row) for row in rows]
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            raise StorageError('Appointments could not be read.') from exc
        finally:
            db.close()

    def replace_all(self, appointments: Iterable[AppointmentRecord]) -> None:
        """Make the table hold exactly ``appointments``, in a single transaction."""
        records = {record.id: record for record in appointments}

        db = self._session_factory()
        try:
            existing_rows = {row.id: row for row in db.query(Appointment).all()}

            for appointment_id, row in existing_rows.items():
                if appointment_id not in records:
                    db.delete(row)

            for appointment_id, record in records.items():
                row = existing_rows.get(appointment_id)
                if row is None:
                    row = Appointment(id=appointment_id)
                    db.add(row)
                _apply(row, record)

            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError('Appointments could not be saved.') from exc
        finally:
            db.close()


class InMemoryAppointmentRepository:
    """Process-local repository, used where durability is not needed."""

    def __init__(self, appointments: Sequence[AppointmentRecord] = ()):
        self._lock = Lock()
        self._appointments: tuple[AppointmentRecord, ...] = tuple(_sorted(appointments))

    def load_snapshot(self) -> list[AppointmentRecord]:
        with self._lock:
            return list(self._appointments)

    def replace_all(self, appointments: Iterable[AppointmentRecord]) -> None:
        replacement = tuple(_sorted(appointments))
        with self._lock:
            self._appointments = replacement
