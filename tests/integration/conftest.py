"""Integration test fixtures for database and HTTP client operations.

These fixtures require a reachable PostgreSQL database at DATABASE_URL; the
tests are skipped when it cannot be reached. Migrations are applied once per
test and the snippet table is emptied afterwards.
"""

import asyncio
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from src.codestack.core import db
from src.codestack.core import redis as redis_core
from src.codestack.core.config import get_settings
from src.codestack.core.health import reset_health_cache
from src.codestack.core.migrations import run_migrations_sync
from src.codestack.main import create_app
from src.codestack.repositories import SnippetRepository
from src.codestack.services import SnippetService


@pytest.fixture(autouse=True)
async def _reset_redis_between_tests() -> AsyncGenerator[None]:
    """Close the Redis client after each test.

    Redis clients hold references to their event loop, and pytest creates a
    new loop per test.
    """
    redis_core.reset_redis_state()
    yield
    await redis_core.close_redis()


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Test database engine with the schema migrated to head."""
    await db.dispose_engine()

    settings = get_settings()
    test_engine = create_async_engine(settings.database_url, poolclass=NullPool)

    try:
        async with test_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (OSError, OperationalError, DBAPIError) as e:
        await test_engine.dispose()
        pytest.skip(f"PostgreSQL not reachable: {e}")

    await asyncio.to_thread(run_migrations_sync, "head")

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.execute(text("TRUNCATE code_snippets"))
    await test_engine.dispose()
    await db.dispose_engine()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session for database operations.

    The session does not auto-commit; repository tests commit explicitly
    where they need data to be visible elsewhere.
    """
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def snippet_repo(db_session: AsyncSession) -> SnippetRepository:
    return SnippetRepository(db_session)


@pytest.fixture
def snippet_service(snippet_repo: SnippetRepository, db_session: AsyncSession) -> SnippetService:
    return SnippetService(snippet_repo, db_session)


@pytest.fixture
async def live_client(engine: AsyncEngine) -> AsyncGenerator[AsyncClient]:
    """HTTP client over the real application and database."""
    reset_health_cache()
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    await db.dispose_engine()
    reset_health_cache()
