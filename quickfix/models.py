from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Index, Integer, String, Text

from .db import Base

SERVICE_TYPES = ("plumbing", "electrical", "ac-repair", "cleaning", "painting", "carpentry")
TIME_SLOTS = ("morning", "afternoon", "evening")
URGENCY_LEVELS = ("low", "medium", "high", "emergency")
BOOKING_STATUSES = ("pending", "confirmed", "in-progress", "completed", "cancelled")

DEFAULT_URGENCY = "medium"
DEFAULT_STATUS = "pending"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True)
    booking_id = Column(String, unique=True, nullable=False, index=True)

    customer_name = Column(String(100), nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String(17), nullable=False)

    address_street = Column(String, nullable=False)
    address_city = Column(String, nullable=False)
    address_state = Column(String, nullable=False)
    address_zip_code = Column(String, nullable=False)

    service_type = Column(String, nullable=False)
    service_description = Column(String(500), nullable=False)
    preferred_date = Column(DateTime(timezone=True), nullable=False)
    preferred_time = Column(String, nullable=False)
    urgency = Column(String, nullable=False, default=DEFAULT_URGENCY)

    # admin-mutable
    status = Column(String, nullable=False, default=DEFAULT_STATUS, index=True)
    estimated_cost = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_bookings_email_created_at", "email", "created_at"),
        Index("ix_bookings_service_type_status", "service_type", "status"),
    )

    @property
    def address(self) -> dict:
        return {
            "street": self.address_street,
            "city": self.address_city,
            "state": self.address_state,
            "zipCode": self.address_zip_code,
        }


class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True)
    username = Column(String, unique=True, nullable=False)
    email = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)  # bcrypt hash
    role = Column(String, nullable=False, default="admin")
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
