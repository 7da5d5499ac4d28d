"""Appointment model definitions."""

from sqlalchemy import Column, DateTime, String
from booking.database import Base


class Appointment(Base):
    """Represents a booked slot on the calendar. Times are stored as naive UTC."""
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    summary = Column(String, nullable=False, default="")
    description = Column(String, nullable=False, default="")
    customer_name = Column(String, nullable=False, default="")
    customer_email = Column(String, nullable=False, default="")
    customer_phone = Column(String, nullable=False, default="")
    customer_notes = Column(String, nullable=False, default="")
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)
