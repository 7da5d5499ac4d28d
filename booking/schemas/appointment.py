from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

TEXT_FIELDS = (
    'summary',
    'description',
    'customer_name',
    'customer_email',
    'customer_phone',
    'customer_notes',
)


class AppointmentPayload(BaseModel):
    """Body of create and update requests. JSON keys are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    start: datetime | None = None
    end: datetime | None = None
    summary: str | None = None
    description: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    customer_notes: str | None = None

    @field_validator(*TEXT_FIELDS)
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip()

    def text_fields(self, only_set: bool = False) -> dict[str, str]:
        values = {}
        for name in TEXT_FIELDS:
            if only_set and name not in self.model_fields_set:
                continue
            values[name] = getattr(self, name) or ''
        return values


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    start: datetime
    end: datetime
    summary: str
    description: str
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_notes: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AppointmentEnvelope(BaseModel):
    appointment: AppointmentResponse


class AppointmentListResponse(BaseModel):
    appointments: list[AppointmentResponse]
