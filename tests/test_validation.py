from datetime import datetime, timedelta, timezone

import pytest

from quickfix.errors import ValidationError
from quickfix.validation import field_errors, validate_booking

from .conftest import booking_payload

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _payload(**overrides):
    overrides.setdefault("preferredDate", (NOW + timedelta(days=1)).isoformat())
    return booking_payload(**overrides)


def _fields(raw) -> set[str]:
    with pytest.raises(ValidationError) as exc_info:
        validate_booking(raw, now=NOW)
    return exc_info.value.fields()


def test_valid_submission_is_normalized():
    draft = validate_booking(
        _payload(customerName="  Jane Doe  ", serviceDescription="  Leaking kitchen sink  "),
        now=NOW,
    )

    assert draft.customer_name == "Jane Doe"
    assert draft.email == "jane@x.com"
    assert draft.service_description == "Leaking kitchen sink"
    assert draft.address.zip_code == "10001"
    assert draft.preferred_date.tzinfo is not None


def test_urgency_defaults_to_medium():
    raw = _payload()
    del raw["urgency"]
    assert validate_booking(raw, now=NOW).urgency == "medium"


def test_all_violations_are_reported_together():
    raw = _payload(
        customerName="J",
        email="not-an-email",
        phone="0123",
        serviceType="roofing",
        serviceDescription="short",
        preferredTime="night",
        urgency="whenever",
    )

    assert _fields(raw) == {
        "customerName",
        "email",
        "phone",
        "serviceType",
        "serviceDescription",
        "preferredTime",
        "urgency",
    }


@pytest.mark.parametrize("value", [NOW, NOW - timedelta(seconds=1), NOW - timedelta(days=3)])
def test_preferred_date_must_be_strictly_future(value):
    assert _fields(_payload(preferredDate=value.isoformat())) == {"preferredDate"}


def test_unparseable_preferred_date():
    with pytest.raises(ValidationError) as exc_info:
        validate_booking(_payload(preferredDate="next tuesday-ish"), now=NOW)
    assert exc_info.value.errors[0].field == "preferredDate"
    assert exc_info.value.errors[0].message == "Please provide a valid date"


def test_naive_preferred_date_is_read_as_utc():
    draft = validate_booking(_payload(preferredDate="2025-06-02T09:00:00"), now=NOW)
    assert draft.preferred_date == datetime(2025, 6, 2, 9, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("phone", ["+15551234567", "15551234567", "9"])
def test_phone_accepts_pattern(phone):
    assert validate_booking(_payload(phone=phone), now=NOW).phone == phone


@pytest.mark.parametrize("phone", ["+0555", "555-123-4567", "+12345678901234567", ""])
def test_phone_rejects_pattern(phone):
    assert _fields(_payload(phone=phone)) == {"phone"}


def test_customer_name_bounds():
    assert validate_booking(_payload(customerName="Jo"), now=NOW)
    assert validate_booking(_payload(customerName="x" * 100), now=NOW)
    assert _fields(_payload(customerName="x" * 101)) == {"customerName"}
    assert _fields(_payload(customerName="   J   ")) == {"customerName"}


def test_service_description_bounds():
    assert validate_booking(_payload(serviceDescription="x" * 10), now=NOW)
    assert validate_booking(_payload(serviceDescription="x" * 500), now=NOW)
    assert _fields(_payload(serviceDescription="x" * 501)) == {"serviceDescription"}


def test_blank_address_parts_are_reported_individually():
    raw = _payload(address={"street": " ", "city": "Metropolis", "state": "", "zipCode": "10001"})
    assert _fields(raw) == {"address.street", "address.state"}


def test_missing_address_reports_every_part():
    raw = _payload()
    del raw["address"]
    assert _fields(raw) == {"address.street", "address.city", "address.state", "address.zipCode"}


def test_missing_fields_use_friendly_messages():
    with pytest.raises(ValidationError) as exc_info:
        validate_booking({}, now=NOW)

    messages = {e.field: e.message for e in exc_info.value.errors}
    assert messages["preferredDate"] == "Preferred date is required"
    assert messages["serviceType"] == "Please select a valid service type"
    assert "urgency" not in messages


def test_non_object_body_is_rejected():
    assert _fields(["not", "an", "object"]) == {"body"}


def test_field_errors_strips_location_root():
    errors = field_errors(
        [
            {"type": "missing", "loc": ("body", "status"), "msg": "Field required"},
            {"type": "greater_than_equal", "loc": ("query", "page"), "msg": "too small"},
        ]
    )
    assert [(e.field, e.message) for e in errors] == [
        ("status", "Please provide a valid status"),
        ("page", "Page must be a positive integer"),
    ]


def test_offset_preferred_date_is_normalized_to_utc():
    draft = validate_booking(_payload(preferredDate="2025-06-02T09:00:00-05:00"), now=NOW)
    assert draft.preferred_date == datetime(2025, 6, 2, 14, 0, tzinfo=timezone.utc)
    assert draft.preferred_date.utcoffset() == timedelta(0)


def test_naive_now_is_read_as_utc():
    naive_now = NOW.replace(tzinfo=None)

    assert validate_booking(_payload(), now=naive_now)
    with pytest.raises(ValidationError) as exc_info:
        validate_booking(_payload(preferredDate=NOW.isoformat()), now=naive_now)
    assert exc_info.value.fields() == {"preferredDate"}
