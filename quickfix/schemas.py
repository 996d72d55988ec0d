import math
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import BOOKING_STATUSES
from .validation import FIELD_MESSAGES


def _aware(dt: datetime | None) -> datetime | None:
    # sqlite hands back naive datetimes; everything is stored as UTC
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ---- Requests ----

class BookingUpdate(BaseModel):
    """
    Admin update of a booking. `status` is required; `notes` and
    `estimatedCost` are applied only when present in the payload, and an
    explicit null clears them.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: str
    notes: str | None = None
    estimated_cost: float | None = Field(default=None, alias="estimatedCost")

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        if v not in BOOKING_STATUSES:
            raise ValueError(FIELD_MESSAGES["status"])
        return v

    @field_validator("notes")
    @classmethod
    def _notes(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if len(v) > 1000:
            raise ValueError(FIELD_MESSAGES["notes"])
        return v or None

    @field_validator("estimated_cost")
    @classmethod
    def _estimated_cost(cls, v: float | None) -> float | None:
        if v is not None and (not math.isfinite(v) or v < 0):
            raise ValueError(FIELD_MESSAGES["estimatedCost"])
        return v

    def provided(self, field_name: str) -> bool:
        return field_name in self.model_fields_set


class LoginRequest(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError(FIELD_MESSAGES["username"])
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError(FIELD_MESSAGES["password"])
        return v


class BookingFilter(BaseModel):
    status: str | None = None
    service_type: str | None = None


# ---- Responses ----

class AddressOut(CamelModel):
    street: str
    city: str
    state: str
    zip_code: str


class BookingOut(CamelModel):
    id: str
    customer_name: str
    email: str
    phone: str
    address: AddressOut
    service_type: str
    service_description: str
    preferred_date: datetime
    preferred_time: str
    urgency: str
    status: str
    estimated_cost: float | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, booking) -> "BookingOut":
        return cls(
            id=booking.booking_id,
            customer_name=booking.customer_name,
            email=booking.email,
            phone=booking.phone,
            address=AddressOut(
                street=booking.address_street,
                city=booking.address_city,
                state=booking.address_state,
                zip_code=booking.address_zip_code,
            ),
            service_type=booking.service_type,
            service_description=booking.service_description,
            preferred_date=_aware(booking.preferred_date),
            preferred_time=booking.preferred_time,
            urgency=booking.urgency,
            status=booking.status,
            estimated_cost=booking.estimated_cost,
            notes=booking.notes,
            created_at=_aware(booking.created_at),
            updated_at=_aware(booking.updated_at),
        )


class BookingCreated(CamelModel):
    booking_id: str
    customer_name: str
    service_type: str
    preferred_date: datetime
    status: str


class BookingSummary(CamelModel):
    id: str
    customer_name: str
    service_type: str
    status: str
    created_at: datetime

    @classmethod
    def from_model(cls, booking) -> "BookingSummary":
        return cls(
            id=booking.booking_id,
            customer_name=booking.customer_name,
            service_type=booking.service_type,
            status=booking.status,
            created_at=_aware(booking.created_at),
        )


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_bookings: int
    has_next_page: bool
    has_prev_page: bool


class BookingPage(CamelModel):
    items: list[BookingOut]
    pagination: Pagination
    stats: dict[str, int]


class ServiceStat(CamelModel):
    service_type: str
    count: int


class DashboardStats(CamelModel):
    total_bookings: int
    pending_bookings: int
    completed_bookings: int
    service_stats: list[ServiceStat]
    recent_bookings: list[BookingSummary]


class AdminOut(CamelModel):
    id: int
    username: str
    email: str
    role: str
