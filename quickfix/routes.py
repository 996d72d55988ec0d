from fastapi import APIRouter, BackgroundTasks, Depends, Request

from .deps import get_booking_store, get_notifications
from .errors import FieldError, ValidationError
from .notifications import BookingNotifications
from .schemas import BookingCreated, BookingOut
from .store import BookingStore
from .validation import validate_booking

router = APIRouter(tags=["Bookings"])


@router.post("/bookings", status_code=201)
async def create_booking(
    request: Request,
    background: BackgroundTasks,
    store: BookingStore = Depends(get_booking_store),
    notifications: BookingNotifications = Depends(get_notifications),
):
    try:
        raw = await request.json()
    except ValueError:
        raise ValidationError([FieldError("body", "Request body must be valid JSON")]) from None

    draft = validate_booking(raw)
    booking = await store.create(draft)

    # confirmation goes out after the response; its failure never affects it
    background.add_task(notifications.booking_created, BookingOut.from_model(booking))

    created = BookingCreated(
        booking_id=booking.booking_id,
        customer_name=booking.customer_name,
        service_type=booking.service_type,
        preferred_date=draft.preferred_date,
        status=booking.status,
    )
    return {"success": True, "message": "Booking created successfully", "data": created.to_json()}


@router.get("/bookings/customer/{email}")
async def get_bookings_by_email(email: str, store: BookingStore = Depends(get_booking_store)):
    bookings = await store.list_by_email(email)
    return {
        "success": True,
        "count": len(bookings),
        "data": [BookingOut.from_model(b).to_json() for b in bookings],
    }


@router.get("/bookings/{booking_id}")
async def get_booking(booking_id: str, store: BookingStore = Depends(get_booking_store)):
    booking = await store.require(booking_id)
    return {"success": True, "data": BookingOut.from_model(booking).to_json()}
