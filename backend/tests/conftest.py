"""
Pytest configuration and fixtures
"""
import os
from types import SimpleNamespace

# Point settings at SQLite before the application is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SEED_ON_STARTUP", "false")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.main import app as application
from app.models import forum as forum_models  # noqa: F401
from app.models import user as user_models  # noqa: F401
from app.modules.forum.service import ForumService


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test"""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    """Create a database session for testing"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def forum(db):
    return ForumService(db)


@pytest_asyncio.fixture
async def seeded(session_factory):
    """Two users, one category and one question, committed"""
    async with session_factory() as session:
        forum = ForumService(session)
        alice = await forum.create_user("Alice", "alice@example.com")
        bob = await forum.create_user("Bob", "bob@example.com")
        physics = await forum.create_category("Physics", color="#3366ff")
        question = await forum.create_question(
            user_id=alice.id,
            category_id=physics.id,
            title="Why is the sky blue?",
            description="It is blue during the day and red at sunset.",
        )
        await session.commit()

        return SimpleNamespace(
            alice_id=alice.id,
            bob_id=bob.id,
            category_id=physics.id,
            question_id=question.id,
        )


@pytest_asyncio.fixture
async def client(session_factory):
    """Create test client with database dependency override"""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    application.dependency_overrides.clear()
