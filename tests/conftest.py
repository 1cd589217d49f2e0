"""
Pytest Configuration and Centralized Fixtures.

Provides reusable fixtures for testing:
- A SQLite database per test, created from the ORM metadata and seeded
- Sessions bound to it, for service-level tests
- The FastAPI app with its database dependencies overridden
- An httpx client over the app and bearer headers for the seed users
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable, Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Set required environment variables BEFORE importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-jwt-signing-min-32-chars")
os.environ.setdefault("TRACING_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "console")

from app.db.models import Base, User
from app.db.seed import DEFAULT_PASSWORD, SeedSummary, seed_database
from app.db.session import enable_sqlite_foreign_keys, get_read_db, get_write_db
from app.services.auth import AuthService, hash_password

OWNER_EMAIL = "ivan@admin.local"
FRONTEND_EMAIL = "elena@frontend.local"
SEED_PASSWORD = DEFAULT_PASSWORD


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def seed_password_hash() -> str:
    """Argon2 hash of the seed password, computed once per run."""
    return hash_password(SEED_PASSWORD)


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine so every session sees the same data."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'directory.db'}")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def seeded(
    session_factory: async_sessionmaker[AsyncSession], seed_password_hash: str
) -> SeedSummary:
    """Seed roles, categories, tags, users and tools."""
    async with session_factory() as session:
        return await seed_database(session, password_hash=seed_password_hash)


@pytest.fixture
async def db(
    session_factory: async_sessionmaker[AsyncSession], seeded: SeedSummary
) -> AsyncGenerator[AsyncSession, None]:
    """Session on the seeded database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed_user(db: AsyncSession) -> Callable[[str], Awaitable[User]]:
    """Factory loading a seed user by email."""

    async def _load(email: str) -> User:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one()

    return _load


# ============================================================================
# API Fixtures
# ============================================================================


@pytest.fixture
def app(
    session_factory: async_sessionmaker[AsyncSession], seeded: SeedSummary
) -> Iterator[FastAPI]:
    """The application with both database dependencies bound to the test database."""
    from app.main import app as application

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_write_db] = override_get_db
    application.dependency_overrides[get_read_db] = override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client over the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def bearer_headers(
    db: AsyncSession, seed_user: Callable[[str], Awaitable[User]]
) -> Callable[[str], Awaitable[dict[str, str]]]:
    """Factory returning an Authorization header for a seed user."""

    async def _headers(email: str) -> dict[str, str]:
        user = await seed_user(email)
        token = AuthService(db).issue_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
async def owner_headers(
    bearer_headers: Callable[[str], Awaitable[dict[str, str]]],
) -> dict[str, str]:
    """Owner role: permissions ["*"]."""
    return await bearer_headers(OWNER_EMAIL)


@pytest.fixture
async def frontend_headers(
    bearer_headers: Callable[[str], Awaitable[dict[str, str]]],
) -> dict[str, str]:
    """Frontend developer role: no taxonomy management."""
    return await bearer_headers(FRONTEND_EMAIL)
