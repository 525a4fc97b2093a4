"""
Shared test fixtures for the Reading Club test suite.

Async throughout (aiosqlite + AsyncSession). Each test gets a fresh in-memory
database; the app's ``get_db`` dependency is pointed at it.
"""

import os
import sys
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from readingclub.api.v1.deps import get_db
from readingclub.core.security import create_access_token, hash_pin
from readingclub.db.base import Base
from readingclub.main import app
from readingclub.models.book import Book
from readingclub.models.user import User

API = "/api/v1"

USER_PIN = "1234"
ADMIN_PIN = "140181"


@pytest.fixture
async def test_engine():
    """Fresh in-memory database with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ── Data helpers ────────────────────────────────────────────────────
async def create_user(
    session: AsyncSession,
    email: str,
    pin: str = USER_PIN,
    role: str = "user",
    **fields,
) -> User:
    fields.setdefault("subscription_status", "active")
    user = User(email=email, hashed_pin=hash_pin(pin), role=role, **fields)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def create_book(session: AsyncSession, **fields) -> Book:
    fields.setdefault("title", "L'Ombre du Silence")
    fields.setdefault("author", "Marc Levy")
    fields.setdefault("genre", "polar")
    fields.setdefault("editorial_summary", "Une enquête au cœur des secrets d'État.")
    fields.setdefault("content_url", "https://example.com/books/1")
    fields.setdefault("is_published", True)
    fields.setdefault("published_at", datetime(2024, 12, 15, tzinfo=timezone.utc))
    book = Book(**fields)
    session.add(book)
    await session.commit()
    await session.refresh(book)
    return book


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


# ── Auth fixtures ───────────────────────────────────────────────────
@pytest.fixture
async def client_user(db_session: AsyncSession) -> User:
    return await create_user(
        db_session,
        "client@example.com",
        first_name="Alice",
        last_name="Dupont",
        country="France",
        notifications_accepted=True,
    )


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "admin@example.com", pin=ADMIN_PIN, role="admin")


@pytest.fixture
def user_headers(client_user: User) -> dict[str, str]:
    return auth_headers(client_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return auth_headers(admin_user)
