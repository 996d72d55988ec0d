from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from .config import Settings

Base = declarative_base()


def get_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(settings.DATABASE_URL, echo=settings.DB_ECHO, future=True)


def get_session(engine: AsyncEngine):
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine):
    # imported for its side effect of registering tables on Base.metadata
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
