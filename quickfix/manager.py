import logging
import math

from fastapi import BackgroundTasks

from .errors import FieldError, ValidationError
from .notifications import BookingNotifications
from .schemas import (
    BookingFilter,
    BookingOut,
    BookingPage,
    BookingSummary,
    BookingUpdate,
    DashboardStats,
    Pagination,
    ServiceStat,
)
from .store import BookingStore

logger = logging.getLogger(__name__)

# pending -> confirmed -> in-progress -> completed; cancellable until terminal
STATUS_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"in-progress", "cancelled"},
    "in-progress": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

RECENT_BOOKINGS_LIMIT = 5


def assert_status_transition(current: str, target: str) -> None:
    if current == target:
        return
    if target not in STATUS_TRANSITIONS.get(current, set()):
        raise ValidationError(
            [FieldError("status", f"Invalid status transition: {current} -> {target}")]
        )


class BookingManager:
    """
    Admin-side booking operations. Access control happens before this is
    reached (see `security.get_current_admin`).

    Status transitions are permissive unless `enforce_transitions` is set, in
    which case `STATUS_TRANSITIONS` is applied.
    """

    def __init__(
        self,
        store: BookingStore,
        notifications: BookingNotifications,
        background: BackgroundTasks | None = None,
        enforce_transitions: bool = False,
    ):
        self.store = store
        self.notifications = notifications
        self.background = background
        self.enforce_transitions = enforce_transitions

    async def _notify(self, fn, *args):
        if self.background is not None:
            self.background.add_task(fn, *args)
        else:
            await fn(*args)

    async def list_bookings(
        self,
        filters: BookingFilter,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> BookingPage:
        items, total = await self.store.list_filtered(filters, sort_by, sort_order, page, limit)
        total_pages = math.ceil(total / limit) if limit else 0
        stats = await self.store.aggregate_by_status()

        return BookingPage(
            items=[BookingOut.from_model(b) for b in items],
            pagination=Pagination(
                current_page=page,
                total_pages=total_pages,
                total_bookings=total,
                has_next_page=page < total_pages,
                has_prev_page=page > 1,
            ),
            stats=stats,
        )

    async def update_booking(self, booking_id: str, update: BookingUpdate) -> BookingOut:
        current = await self.store.require(booking_id)
        before = (current.status, current.notes, current.estimated_cost)
        if self.enforce_transitions:
            assert_status_transition(current.status, update.status)

        booking, old_status = await self.store.update_status(booking_id, update)
        snapshot = BookingOut.from_model(booking)
        logger.info("Booking %s updated: %s -> %s", booking_id, old_status, snapshot.status)

        # no-op saves send nothing
        if (snapshot.status, snapshot.notes, snapshot.estimated_cost) != before:
            await self._notify(self.notifications.status_changed, snapshot, old_status)
        return snapshot

    async def delete_booking(self, booking_id: str) -> None:
        await self.store.delete(booking_id)

    async def dashboard_stats(self) -> DashboardStats:
        by_status = await self.store.aggregate_by_status()
        by_service = await self.store.aggregate_by_service_type()
        recent = await self.store.recent(RECENT_BOOKINGS_LIMIT)

        return DashboardStats(
            total_bookings=sum(by_status.values()),
            pending_bookings=by_status.get("pending", 0),
            completed_bookings=by_status.get("completed", 0),
            service_stats=[
                ServiceStat(service_type=service_type, count=count)
                for service_type, count in sorted(by_service.items())
            ],
            recent_bookings=[BookingSummary.from_model(b) for b in recent],
        )
