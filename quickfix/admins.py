import logging

from passlib.context import CryptContext
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings
from .errors import AuthenticationError, PersistenceError
from .models import Admin, utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

BOOTSTRAP_ROLE = "super-admin"

NOT_FOUND_MESSAGE = "Invalid credentials. Admin user not found."
NOT_FOUND_HINT = "Make sure you have run 'quickfix-seed-admin' to create an admin user."
BAD_PASSWORD_MESSAGE = "Invalid credentials. Incorrect password."
BAD_PASSWORD_HINT = "Run 'quickfix-seed-admin --reset-password' to reset the admin password."
GENERIC_MESSAGE = "Invalid credentials."


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


class AdminStore:
    def __init__(self, db: AsyncSession, generic_errors: bool = False):
        self.db = db
        self.generic_errors = generic_errors

    async def _commit(self, action: str):
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to %s: %s", action, e)
            raise PersistenceError(f"Failed to {action}") from e

    async def get(self, admin_id: int) -> Admin | None:
        res = await self.db.execute(select(Admin).where(Admin.id == admin_id))
        return res.scalar_one_or_none()

    async def find(self, username_or_email: str, active_only: bool = True) -> Admin | None:
        stmt = select(Admin).where(
            or_(Admin.username == username_or_email, Admin.email == username_or_email)
        )
        if active_only:
            stmt = stmt.where(Admin.is_active.is_(True))
        res = await self.db.execute(stmt)
        return res.scalars().first()

    async def count(self, active_only: bool = False) -> int:
        stmt = select(func.count()).select_from(Admin)
        if active_only:
            stmt = stmt.where(Admin.is_active.is_(True))
        res = await self.db.execute(stmt)
        return int(res.scalar_one())

    def _failure(self, reason: str) -> AuthenticationError:
        if self.generic_errors:
            return AuthenticationError(GENERIC_MESSAGE, reason=reason)
        if reason == "not_found":
            return AuthenticationError(NOT_FOUND_MESSAGE, reason=reason, hint=NOT_FOUND_HINT)
        return AuthenticationError(BAD_PASSWORD_MESSAGE, reason=reason, hint=BAD_PASSWORD_HINT)

    async def verify_credentials(self, username_or_email: str, password: str) -> Admin:
        """
        Match an active admin by exact username or email and check the password.

        An inactive admin is reported exactly like an unknown one.
        """
        admin = await self.find(username_or_email)
        if not admin:
            logger.info("Admin login failed for %r: no matching active admin", username_or_email)
            raise self._failure("not_found")

        if not verify_password(password, admin.password):
            logger.info("Admin login failed for %r: password mismatch", admin.username)
            raise self._failure("bad_password")

        return admin

    async def record_login(self, admin: Admin):
        admin.last_login = utcnow()
        await self._commit("record admin login")

    async def create(
        self,
        username: str,
        email: str,
        password: str,
        role: str = BOOTSTRAP_ROLE,
        is_active: bool = True,
    ) -> Admin:
        now = utcnow()
        admin = Admin(
            username=username,
            email=email.strip().lower(),
            password=hash_password(password),
            role=role,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        self.db.add(admin)
        await self._commit("create admin")
        logger.info("Admin %s created with role %s", admin.username, admin.role)
        return admin

    async def set_password(self, admin: Admin, password: str):
        admin.password = hash_password(password)
        admin.updated_at = utcnow()
        await self._commit("update admin password")

    async def set_active(self, admin: Admin, is_active: bool):
        admin.is_active = is_active
        admin.updated_at = utcnow()
        await self._commit("update admin")


async def ensure_bootstrap_admin(
    db: AsyncSession,
    settings: Settings,
    reset_password: bool = False,
) -> tuple[Admin, bool]:
    """
    Create the configured bootstrap admin, or optionally reset its password.

    Returns the admin and whether it was newly created.
    """
    store = AdminStore(db)
    existing = await store.find(settings.ADMIN_USERNAME, active_only=False)
    if existing is None:
        existing = await store.find(settings.ADMIN_EMAIL.lower(), active_only=False)

    if existing is not None:
        if reset_password:
            await store.set_password(existing, settings.ADMIN_PASSWORD)
            logger.info("Bootstrap admin %s password reset", existing.username)
        return existing, False

    admin = await store.create(
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL,
        password=settings.ADMIN_PASSWORD,
        role=BOOTSTRAP_ROLE,
    )
    return admin, True
