"""Pytest configuration and fixtures for Onboard tests.

Every test gets a fresh SQLite database file (aiosqlite) with the full
schema and the default step catalog. Requests go through the real app
with `get_db` overridden, one session per request, so commit/rollback
behaves as in production. The rate limiter is switched off here and
tested on its own in test_rate_limit.py.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_STEPS_ON_STARTUP"] = "false"
os.environ["SENDGRID_API_KEY"] = ""
os.environ["UPLOADTHING_SECRET"] = ""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from onboard.auth.jwt import create_access_token
from onboard.auth.password import hash_password
from onboard.database import Base, enable_sqlite_foreign_keys, get_db
from onboard.main import app
from onboard.models import Client, OnboardingProgress, OnboardingStatus, Role
from onboard.services.onboarding import ensure_step_catalog

TEST_PASSWORD = "Secure123"


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Fresh SQLite database with every table created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'onboard_test.db'}",
        poolclass=NullPool,
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and checking results.

    Fixtures commit what they create so request sessions can see it.
    """
    async with session_factory() as session:
        await ensure_step_catalog(session)
        await session.commit()
        yield session


@pytest_asyncio.fixture
async def client(db_session, session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, with a request-scoped test session."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as http:
        yield http

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

async def create_client(
    session: AsyncSession,
    email: str,
    *,
    role: Role = Role.USER,
    first_name: str = "Test",
    last_name: str = "User",
    password: str = TEST_PASSWORD,
) -> Client:
    """Insert a client with its onboarding progress and commit."""
    account = Client(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
    )
    session.add(account)
    await session.flush()
    session.add(OnboardingProgress(
        client_id=account.id,
        current_step=1,
        status=OnboardingStatus.PENDING,
    ))
    await session.commit()
    return account


def bearer(account: Client) -> dict:
    return {"Authorization": f"Bearer {create_access_token(account.id, account.email)}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> Client:
    return await create_client(db_session, "user@example.com")


@pytest_asyncio.fixture
async def test_admin(db_session: AsyncSession) -> Client:
    return await create_client(
        db_session,
        "admin@example.com",
        role=Role.ADMIN,
        first_name="Ada",
        last_name="Admin",
    )


@pytest.fixture
def auth_headers(test_user: Client) -> dict:
    """Authorization headers for the regular test user."""
    return bearer(test_user)


@pytest.fixture
def admin_headers(test_admin: Client) -> dict:
    return bearer(test_admin)
