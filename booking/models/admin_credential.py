"""Administrator credential model definitions."""

from sqlalchemy import Column, DateTime, Integer, String
from booking.database import Base

SINGLETON_ID = 1


class AdminCredential(Base):
    """The one administrator password hash."""
    __tablename__ = "admin_credentials"

    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    password_hash = Column(String, nullable=False)
    updated_at = Column(DateTime, nullable=False)
