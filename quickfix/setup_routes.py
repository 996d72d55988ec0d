from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .admins import AdminStore, ensure_bootstrap_admin
from .config import Settings
from .deps import get_db, get_settings
from .errors import FieldError, ValidationError

router = APIRouter(prefix="/setup", tags=["Setup"])


@router.get("/admin-status")
async def admin_status(db: AsyncSession = Depends(get_db)):
    store = AdminStore(db)
    total = await store.count()
    active = await store.count(active_only=True)
    return {
        "success": True,
        "data": {
            "totalAdmins": total,
            "activeAdmins": active,
            "hasAdmin": total > 0,
            "canCreateAdmin": total == 0,
        },
    }


@router.post("/create-admin", status_code=201)
async def create_admin(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """One-shot bootstrap: only works while no admin exists at all."""
    if await AdminStore(db).count() > 0:
        raise ValidationError(
            [FieldError("admin", "An admin account already exists")],
            message="Admin already exists. Use 'quickfix-seed-admin --reset-password' to reset the password.",
        )

    admin, _ = await ensure_bootstrap_admin(db, settings)
    return {
        "success": True,
        "message": "Admin created successfully!",
        "data": {"username": admin.username, "email": admin.email, "role": admin.role},
    }
