"""
Booking submission rules.

`validate_booking` is a pure function of its input: it returns a normalized
`BookingDraft` or raises `ValidationError` listing every field that failed,
not just the first one.
"""

import re
from datetime import date, datetime, timezone
from typing import Any, Iterable

from dateutil import parser
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import FieldError, ValidationError
from .models import DEFAULT_URGENCY, SERVICE_TYPES, TIME_SLOTS, URGENCY_LEVELS

EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$")
PHONE_RE = re.compile(r"^[+]?[1-9]\d{0,15}$")

ADDRESS_FIELDS = ("address.street", "address.city", "address.state", "address.zipCode")

FIELD_MESSAGES = {
    "customerName": "Customer name must be between 2 and 100 characters",
    "email": "Please provide a valid email address",
    "phone": "Please provide a valid phone number",
    "address.street": "Street address is required",
    "address.city": "City is required",
    "address.state": "State is required",
    "address.zipCode": "ZIP code is required",
    "serviceType": "Please select a valid service type",
    "serviceDescription": "Service description must be between 10 and 500 characters",
    "preferredDate": "Preferred date is required",
    "preferredTime": "Please select a valid time slot",
    "urgency": "Please select a valid urgency level",
    # admin payloads
    "status": "Please provide a valid status",
    "estimatedCost": "Estimated cost must be a non-negative number",
    "notes": "Notes cannot exceed 1000 characters",
    "username": "Username is required",
    "password": "Password must be at least 6 characters",
    "page": "Page must be a positive integer",
    "limit": "Limit must be between 1 and 100",
}

_LOCATION_ROOTS = {"body", "query", "path"}


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class Address(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    street: str
    city: str
    state: str
    zip_code: str = Field(alias="zipCode")

    @field_validator("street", "city", "state", "zip_code")
    @classmethod
    def _required(cls, v: str, info: ValidationInfo) -> str:
        v = v.strip()
        if not v:
            path = "address.zipCode" if info.field_name == "zip_code" else f"address.{info.field_name}"
            raise ValueError(FIELD_MESSAGES[path])
        return v


class BookingDraft(BaseModel):
    """A validated, normalized booking submission that has not been stored yet."""

    model_config = ConfigDict(populate_by_name=True)

    customer_name: str = Field(alias="customerName")
    email: str
    phone: str
    address: Address
    service_type: str = Field(alias="serviceType")
    service_description: str = Field(alias="serviceDescription")
    preferred_date: datetime = Field(alias="preferredDate")
    preferred_time: str = Field(alias="preferredTime")
    urgency: str = DEFAULT_URGENCY

    @field_validator("customer_name")
    @classmethod
    def _customer_name(cls, v: str) -> str:
        v = v.strip()
        if not 2 <= len(v) <= 100:
            raise ValueError(FIELD_MESSAGES["customerName"])
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_RE.match(v):
            raise ValueError(FIELD_MESSAGES["email"])
        return v

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        v = v.strip()
        if not PHONE_RE.match(v):
            raise ValueError(FIELD_MESSAGES["phone"])
        return v

    @field_validator("service_type")
    @classmethod
    def _service_type(cls, v: str) -> str:
        if v not in SERVICE_TYPES:
            raise ValueError(FIELD_MESSAGES["serviceType"])
        return v

    @field_validator("service_description")
    @classmethod
    def _service_description(cls, v: str) -> str:
        v = v.strip()
        if not 10 <= len(v) <= 500:
            raise ValueError(FIELD_MESSAGES["serviceDescription"])
        return v

    @field_validator("preferred_date", mode="before")
    @classmethod
    def _parse_preferred_date(cls, v: Any) -> datetime:
        v = _strip(v)
        if isinstance(v, datetime):
            parsed = v
        elif isinstance(v, date):
            parsed = datetime(v.year, v.month, v.day)
        elif isinstance(v, str) and v:
            try:
                parsed = parser.isoparse(v)
            except (ValueError, OverflowError):
                raise ValueError("Please provide a valid date") from None
        else:
            raise ValueError("Please provide a valid date")

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    @field_validator("preferred_date")
    @classmethod
    def _future_date(cls, v: datetime, info: ValidationInfo) -> datetime:
        now = (info.context or {}).get("now") or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        if v <= now:
            raise ValueError("Preferred date must be in the future")
        return v

    @field_validator("preferred_time")
    @classmethod
    def _preferred_time(cls, v: str) -> str:
        if v not in TIME_SLOTS:
            raise ValueError(FIELD_MESSAGES["preferredTime"])
        return v

    @field_validator("urgency")
    @classmethod
    def _urgency(cls, v: str) -> str:
        if v not in URGENCY_LEVELS:
            raise ValueError(FIELD_MESSAGES["urgency"])
        return v


def _field_path(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOCATION_ROOTS:
        parts = parts[1:]
    return ".".join(parts) or "body"


def field_errors(errors: Iterable[dict]) -> list[FieldError]:
    """Convert pydantic error dicts into (field, message) pairs, one per field/message."""
    result: list[FieldError] = []
    seen = set()

    def add(field: str, message: str):
        if (field, message) not in seen:
            seen.add((field, message))
            result.append(FieldError(field, message))

    for err in errors:
        if err.get("type") == "json_invalid":
            add("body", "Request body must be valid JSON")
            continue

        path = _field_path(err.get("loc", ()))

        # a missing or non-object address fails all four of its fields
        if path == "address":
            for sub in ADDRESS_FIELDS:
                add(sub, FIELD_MESSAGES[sub])
            continue

        if err.get("type") == "value_error":
            message = str(err["ctx"]["error"])
        else:
            message = FIELD_MESSAGES.get(path, err.get("msg", "Invalid value"))
        add(path, message)

    return result


def validate_booking(raw: Any, now: datetime | None = None) -> BookingDraft:
    if not isinstance(raw, dict):
        raise ValidationError([FieldError("body", "Request body must be a JSON object")])

    try:
        return BookingDraft.model_validate(raw, context={"now": now})
    except PydanticValidationError as exc:
        raise ValidationError(field_errors(exc.errors())) from None
