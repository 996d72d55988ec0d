import logging

from fastapi import APIRouter, Depends, Query

from .admins import AdminStore
from .deps import get_admin_store, get_manager, get_token_service
from .manager import BookingManager
from .models import Admin
from .schemas import AdminOut, BookingFilter, BookingUpdate, LoginRequest
from .security import TokenService, get_current_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/login")
async def login(
    data: LoginRequest,
    admins: AdminStore = Depends(get_admin_store),
    tokens: TokenService = Depends(get_token_service),
):
    admin = await admins.verify_credentials(data.username, data.password)
    await admins.record_login(admin)
    token = tokens.issue(admin)

    logger.info("Admin %s logged in", admin.username)
    return {
        "success": True,
        "message": "Login successful",
        "data": {
            "token": token,
            "admin": AdminOut(
                id=admin.id,
                username=admin.username,
                email=admin.email,
                role=admin.role,
            ).to_json(),
        },
    }


@router.get("/bookings")
async def list_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: str | None = Query(None),
    service_type: str | None = Query(None, alias="serviceType"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    admin: Admin = Depends(get_current_admin),
    manager: BookingManager = Depends(get_manager),
):
    result = await manager.list_bookings(
        BookingFilter(status=status, service_type=service_type),
        sort_by=sort_by,
        sort_order="asc" if sort_order == "asc" else "desc",
        page=page,
        limit=limit,
    )
    body = result.to_json()
    return {
        "success": True,
        "data": body["items"],
        "pagination": body["pagination"],
        "stats": body["stats"],
    }


@router.put("/bookings/{booking_id}")
async def update_booking(
    booking_id: str,
    update: BookingUpdate,
    admin: Admin = Depends(get_current_admin),
    manager: BookingManager = Depends(get_manager),
):
    booking = await manager.update_booking(booking_id, update)
    return {"success": True, "message": "Booking updated successfully", "data": booking.to_json()}


@router.delete("/bookings/{booking_id}")
async def delete_booking(
    booking_id: str,
    admin: Admin = Depends(get_current_admin),
    manager: BookingManager = Depends(get_manager),
):
    await manager.delete_booking(booking_id)
    logger.info("Booking %s deleted by %s", booking_id, admin.username)
    return {"success": True, "message": "Booking deleted successfully"}


@router.get("/dashboard/stats")
async def dashboard_stats(
    admin: Admin = Depends(get_current_admin),
    manager: BookingManager = Depends(get_manager),
):
    stats = await manager.dashboard_stats()
    return {"success": True, "data": stats.to_json()}
