from fastapi import BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .admins import AdminStore
from .config import Settings
from .manager import BookingManager
from .notifications import BookingNotifications
from .store import BookingStore


async def get_db(request: Request):
    async with request.app.state.session_factory() as session:
        yield session


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request):
    return request.app.state.tokens


def get_notifications(request: Request) -> BookingNotifications:
    return request.app.state.notifications


def get_booking_store(db: AsyncSession = Depends(get_db)) -> BookingStore:
    return BookingStore(db)


def get_admin_store(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AdminStore:
    return AdminStore(db, generic_errors=settings.GENERIC_AUTH_ERRORS)


def get_manager(
    background: BackgroundTasks,
    store: BookingStore = Depends(get_booking_store),
    notifications: BookingNotifications = Depends(get_notifications),
    settings: Settings = Depends(get_settings),
) -> BookingManager:
    return BookingManager(
        store,
        notifications,
        background,
        enforce_transitions=settings.ENFORCE_STATUS_TRANSITIONS,
    )
