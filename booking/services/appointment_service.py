"""Booking rules for the single provider calendar.

Every mutation runs load-snapshot, conflict check and write while holding the
service's write lock, so two requests for the same slot cannot both pass the
conflict check. Reads do not take the lock.
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from threading import Lock
from typing import Callable

from booking.core import config
from booking.core.errors import NotFound, SlotUnavailable, StorageError, ValidationError
from booking.core.timestamps import ensure_utc, utc_now
from booking.repositories.appointment_repository import AppointmentRecord, AppointmentRepository
from booking.schemas.appointment import AppointmentPayload
from booking.services.conflicts import find_conflicts, overlaps

logger = logging.getLogger(__name__)


def _new_appointment_id() -> str:
    return str(uuid.uuid4())


def validate_interval(start: datetime | None, end: datetime | None) -> tuple[datetime, datetime]:
    if start is None or end is None:
        raise ValidationError('Appointment must include a start and end time.')

    try:
        start = ensure_utc(start)
        end = ensure_utc(end)
    except OverflowError as exc:
        raise ValidationError('Appointment times are out of range.') from exc
    if end <= start:
        raise ValidationError('Appointment end time must be after the start time.')

    return start, end


class AppointmentService:
    def __init__(
        self,
        repository: AppointmentRepository,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = _new_appointment_id,
        default_summary: str = config.DEFAULT_APPOINTMENT_SUMMARY,
    ):
        self._repository = repository
        self._clock = clock
        self._id_factory = id_factory
        self._default_summary = default_summary
        self._write_lock = Lock()

    def list(self, range_start: datetime | None = None, range_end: datetime | None = None) -> list[AppointmentRecord]:
        try:
            appointments = self._repository.load_snapshot()
        except StorageError:
            logger.exception('Failed to read appointments; answering with an empty calendar.')
            return []

        if range_start is not None:
            range_start = ensure_utc(range_start)
            appointments = [appointment for appointment in appointments if appointment.end > range_start]
        if range_end is not None:
            range_end = ensure_utc(range_end)
            appointments = [appointment for appointment in appointments if appointment.start <= range_end]

        return sorted(appointments, key=lambda appointment: appointment.start)

    def create(self, payload: AppointmentPayload) -> AppointmentRecord:
        start, end = validate_interval(payload.start, payload.end)
        fields = payload.text_fields()
        fields['summary'] = fields['summary'] or self._default_summary

        with self._write_lock:
            snapshot = self._repository.load_snapshot()
            conflicts = find_conflicts(snapshot, start, end)
            if conflicts:
                logger.info(
                    'Rejected booking %s-%s: overlaps %s',
                    start.isoformat(),
                    end.isoformat(),
                    ', '.join(appointment.id for appointment in conflicts),
                )
                raise SlotUnavailable('This appointment slot is no longer available.')

            appointment = AppointmentRecord(
                id=self._id_factory(),
                start=start,
                end=end,
                created_at=self._clock(),
                **fields,
            )
            self._repository.replace_all([*snapshot, appointment])

        logger.info('Booked appointment %s for %s-%s', appointment.id, start.isoformat(), end.isoformat())
        return appointment

    def update(self, appointment_id: str, payload: AppointmentPayload) -> AppointmentRecord:
        start, end = validate_interval(payload.start, payload.end)
        fields = payload.text_fields(only_set=True)
        if 'summary' in fields and not fields['summary']:
            fields['summary'] = self._default_summary

        with self._write_lock:
            snapshot = self._repository.load_snapshot()
            current = next((appointment for appointment in snapshot if appointment.id == appointment_id), None)
            if current is None:
                raise NotFound('Appointment not found.')

            if overlaps(snapshot, start, end, exclude_id=appointment_id):
                raise SlotUnavailable('Another appointment is scheduled during that time.')

            updated = replace(current, start=start, end=end, updated_at=self._clock(), **fields)
            self._repository.replace_all(
                updated if appointment.id == appointment_id else appointment
                for appointment in snapshot
            )

        logger.info('Updated appointment %s', appointment_id)
        return updated

    def delete(self, appointment_id: str) -> None:
        with self._write_lock:
            snapshot = self._repository.load_snapshot()
            remaining = [appointment for appointment in snapshot if appointment.id != appointment_id]
            if len(remaining) == len(snapshot):
                raise NotFound('Appointment not found.')

            self._repository.replace_all(remaining)

        logger.info('Deleted appointment %s', appointment_id)
