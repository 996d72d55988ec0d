import argparse
import asyncio
import logging

from .config import Settings
from .db import get_engine, get_session, init_models
from .admins import ensure_bootstrap_admin

logger = logging.getLogger(__name__)


async def seed_admin(settings: Settings, reset_password: bool = False):
    engine = get_engine(settings)
    try:
        await init_models(engine)
        async with get_session(engine)() as db:
            admin, created = await ensure_bootstrap_admin(db, settings, reset_password=reset_password)
    finally:
        await engine.dispose()
    return admin, created


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create or reset the bootstrap admin account.")
    parser.add_argument(
        "--reset-password",
        action="store_true",
        help="reset the existing admin's password to ADMIN_PASSWORD",
    )
    args = parser.parse_args(argv)

    settings = Settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(levelname)s %(name)s: %(message)s")

    admin, created = asyncio.run(seed_admin(settings, reset_password=args.reset_password))
    if created:
        print(f"Admin created: {admin.username} <{admin.email}>")
    elif args.reset_password:
        print(f"Password reset for admin: {admin.username}")
    else:
        print(f"Admin already exists: {admin.username}. Use --reset-password to reset it.")


if __name__ == "__main__":
    main()
