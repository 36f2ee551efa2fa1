"""
Database engine and session management.

One AsyncSession per request; the session commits when the
request handler finishes and rolls back if it raises.
"""

from typing import AsyncGenerator

from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def create_engine(url: str | None = None) -> AsyncEngine:
    """Create async engine for the configured database."""
    url = url or settings.database_url
    options: dict = {"echo": settings.database_echo}

    if not url.startswith("sqlite"):
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
        options["pool_pre_ping"] = True

    return create_async_engine(url, **options)


engine = create_engine()
async_session = async_sessionmaker(bind=engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a transactional session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create all tables."""
    # Register models on Base.metadata
    import app.models.forum  # noqa: F401
    import app.models.user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug(f"Schema ready on {engine.url.render_as_string(hide_password=True)}")


async def close_db() -> None:
    """Dispose engine connection pool."""
    await engine.dispose()
