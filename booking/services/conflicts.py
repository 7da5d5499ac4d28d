"""Overlap detection over an appointment snapshot.

Intervals are half-open, so an appointment ending at 09:30 does not collide
with one starting at 09:30.
"""

from datetime import datetime
from typing import Iterable

from booking.repositories.appointment_repository import AppointmentRecord


def intervals_overlap(first_start: datetime, first_end: datetime, second_start: datetime, second_end: datetime) -> bool:
    return first_end > second_start and first_start < second_end


def find_conflicts(
    existing: Iterable[AppointmentRecord],
    candidate_start: datetime,
    candidate_end: datetime,
    exclude_id: str | None = None,
) -> list[AppointmentRecord]:
    return [
        appointment
        for appointment in existing
        if appointment.id != exclude_id
        and intervals_overlap(appointment.start, appointment.end, candidate_start, candidate_end)
    ]


def overlaps(
    existing: Iterable[AppointmentRecord],
    candidate_start: datetime,
    candidate_end: datetime,
    exclude_id: str | None = None,
) -> bool:
    return bool(find_conflicts(existing, candidate_start, candidate_end, exclude_id=exclude_id))
