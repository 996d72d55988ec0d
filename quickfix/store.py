import logging
import uuid

from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import FieldError, NotFoundError, PersistenceError, ValidationError
from .models import BOOKING_STATUSES, DEFAULT_STATUS, Booking, utcnow
from .schemas import BookingFilter, BookingUpdate
from .validation import FIELD_MESSAGES, BookingDraft

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "createdAt": Booking.created_at,
    "updatedAt": Booking.updated_at,
    "preferredDate": Booking.preferred_date,
    "customerName": Booking.customer_name,
    "serviceType": Booking.service_type,
    "status": Booking.status,
    "urgency": Booking.urgency,
    "estimatedCost": Booking.estimated_cost,
}


class BookingStore:
    """Booking persistence over one request-scoped session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _execute(self, stmt):
        try:
            return await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Booking query failed: %s", e)
            raise PersistenceError("Failed to retrieve bookings") from e

    async def _commit(self, action: str):
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to %s: %s", action, e)
            raise PersistenceError(f"Failed to {action}") from e

    @staticmethod
    def _conditions(filters: BookingFilter | None) -> list:
        conditions = []
        if filters is None:
            return conditions
        if filters.status:
            conditions.append(Booking.status == filters.status)
        if filters.service_type:
            conditions.append(Booking.service_type == filters.service_type)
        return conditions

    async def create(self, draft: BookingDraft) -> Booking:
        now = utcnow()
        booking = Booking(
            booking_id=str(uuid.uuid4()),
            customer_name=draft.customer_name,
            email=draft.email,
            phone=draft.phone,
            address_street=draft.address.street,
            address_city=draft.address.city,
            address_state=draft.address.state,
            address_zip_code=draft.address.zip_code,
            service_type=draft.service_type,
            service_description=draft.service_description,
            preferred_date=draft.preferred_date,
            preferred_time=draft.preferred_time,
            urgency=draft.urgency,
            status=DEFAULT_STATUS,
            created_at=now,
            updated_at=now,
        )
        self.db.add(booking)
        await self._commit("create booking")
        logger.info("Booking %s created (%s)", booking.booking_id, booking.service_type)
        return booking

    async def get(self, booking_id: str) -> Booking | None:
        res = await self._execute(select(Booking).where(Booking.booking_id == booking_id))
        return res.scalar_one_or_none()

    async def require(self, booking_id: str) -> Booking:
        booking = await self.get(booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    async def list_by_email(self, email: str) -> list[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.email == email.strip().lower())
            .order_by(desc(Booking.created_at), desc(Booking.id))
        )
        res = await self._execute(stmt)
        return list(res.scalars().all())

    async def list_filtered(
        self,
        filters: BookingFilter | None = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Booking], int]:
        column = SORT_FIELDS.get(sort_by)
        if column is None:
            raise ValidationError([FieldError("sortBy", f"Cannot sort by '{sort_by}'")])

        # separate count over the same filter; may be stale under concurrent writes
        total = await self.count(filters)
        offset = (page - 1) * limit
        if offset >= total:
            return [], total

        direction = asc if sort_order == "asc" else desc
        stmt = (
            select(Booking)
            .where(*self._conditions(filters))
            .order_by(direction(column), direction(Booking.id))
            .offset(offset)
            .limit(limit)
        )
        res = await self._execute(stmt)
        return list(res.scalars().all()), total

    async def count(self, filters: BookingFilter | None = None) -> int:
        stmt = select(func.count()).select_from(Booking).where(*self._conditions(filters))
        res = await self._execute(stmt)
        return int(res.scalar_one())

    async def update_status(self, booking_id: str, update: BookingUpdate) -> tuple[Booking, str]:
        """Apply an admin update. Returns the booking and its status before the update."""
        if update.status not in BOOKING_STATUSES:
            raise ValidationError([FieldError("status", FIELD_MESSAGES["status"])])

        booking = await self.require(booking_id)
        previous_status = booking.status

        booking.status = update.status
        if update.provided("notes"):
            booking.notes = update.notes
        if update.provided("estimated_cost"):
            booking.estimated_cost = update.estimated_cost
        booking.updated_at = utcnow()

        await self._commit("update booking")
        return booking, previous_status

    async def delete(self, booking_id: str) -> None:
        booking = await self.require(booking_id)
        await self.db.delete(booking)
        await self._commit("delete booking")
        logger.info("Booking %s deleted", booking_id)

    async def aggregate_by_status(self) -> dict[str, int]:
        res = await self._execute(select(Booking.status, func.count()).group_by(Booking.status))
        return {status: count for status, count in res.all()}

    async def aggregate_by_service_type(self) -> dict[str, int]:
        res = await self._execute(
            select(Booking.service_type, func.count()).group_by(Booking.service_type)
        )
        return {service_type: count for service_type, count in res.all()}

    async def recent(self, limit: int = 5) -> list[Booking]:
        stmt = select(Booking).order_by(desc(Booking.created_at), desc(Booking.id)).limit(limit)
        res = await self._execute(stmt)
        return list(res.scalars().all())
