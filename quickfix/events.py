import json
import uuid
from datetime import datetime, timezone

from .schemas import BookingOut

BOOKING_CREATED = "booking.created"
BOOKING_STATUS_CHANGED = "booking.status_changed"


def build_event(event_type: str, data: dict) -> dict:
    return {
        "event_id": str(uuid.uuid4()),
        "event_type": event_type,
        "occurred_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def booking_created_event(booking: BookingOut) -> dict:
    return build_event(BOOKING_CREATED, booking.to_json())


def status_changed_event(booking: BookingOut, old_status: str) -> dict:
    return build_event(
        BOOKING_STATUS_CHANGED,
        {
            "booking_id": booking.id,
            "email": booking.email,
            "old_status": old_status,
            "new_status": booking.status,
            "booking": booking.to_json(),
        },
    )


def to_json(event: dict) -> str:
    return json.dumps(event, separators=(",", ":"), ensure_ascii=False)
