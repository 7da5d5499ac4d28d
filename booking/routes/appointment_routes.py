import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from booking.auth.dependencies import require_admin
from booking.core.timestamps import parse_timestamp
from booking.dependencies import get_appointment_service
from booking.schemas.appointment import (
    AppointmentEnvelope,
    AppointmentListResponse,
    AppointmentPayload,
    AppointmentResponse,
)
from booking.services.appointment_service import AppointmentService

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)


def parse_range_bound(value: str | None, name: str) -> datetime | None:
    """Parse a list filter bound; an unreadable bound leaves that side open."""
    try:
        return parse_timestamp(value)
    except (ValueError, OverflowError):
        logger.warning('Ignoring unparseable %s bound %r on appointment listing.', name, value)
        return None


@router.get('', response_model=AppointmentListResponse)
def list_appointments(
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointments = service.list(
        range_start=parse_range_bound(start, 'start'),
        range_end=parse_range_bound(end, 'end'),
    )
    return AppointmentListResponse(
        appointments=[AppointmentResponse.model_validate(appointment) for appointment in appointments]
    )


@router.post('', response_model=AppointmentEnvelope, status_code=status.HTTP_201_CREATED)
def create_appointment(
    payload: AppointmentPayload,
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.create(payload)
    return AppointmentEnvelope(appointment=AppointmentResponse.model_validate(appointment))


@router.put('/{appointment_id}', response_model=AppointmentEnvelope)
def update_appointment(
    appointment_id: str,
    payload: AppointmentPayload,
    _admin: str = Depends(require_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.update(appointment_id, payload)
    return AppointmentEnvelope(appointment=AppointmentResponse.model_validate(appointment))


@router.delete('/{appointment_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
    appointment_id: str,
    _admin: str = Depends(require_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    service.delete(appointment_id)
