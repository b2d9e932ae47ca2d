"""
Shared pytest configuration for backend tests.

Service tests run against a fresh in-memory SQLite database per test.
Route tests use TestClient with services monkeypatched.
"""

import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date  # noqa: E402

import bcrypt  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tennis_backend.database.db import Base  # noqa: E402
from tennis_backend.database.models import UserRole  # noqa: E402
from tennis_backend.services import tournament_service, user_service  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """In-memory database with all tables created, dropped after the test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        from tennis_backend.database import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with async_session_maker() as session:
        yield session


def _hash(password: str) -> str:
    # Low cost factor keeps the suite fast
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=4)).decode()


async def make_user(session, email, full_name, role=UserRole.PLAYER):
    return await user_service.create_user(
        session=session,
        email=email,
        password_hash=_hash("password1"),
        full_name=full_name,
        role=role,
    )


@pytest_asyncio.fixture
async def user_factory(db_session):
    """Create extra users: await user_factory(email, full_name, role=...)."""

    async def _create(email, full_name, role=UserRole.PLAYER):
        return await make_user(db_session, email, full_name, role)

    return _create


@pytest_asyncio.fixture
async def master_user(db_session):
    return await make_user(db_session, "master@example.com", "Master User", UserRole.MASTER)


@pytest_asyncio.fixture
async def alice(db_session):
    return await make_user(db_session, "alice@example.com", "Alice Ace")


@pytest_asyncio.fixture
async def bob(db_session):
    return await make_user(db_session, "bob@example.com", "Bob Baseline")


@pytest_asyncio.fixture
async def carol(db_session):
    return await make_user(db_session, "carol@example.com", "Carol Court")


@pytest_asyncio.fixture
async def tournament(db_session, master_user, alice, bob, carol):
    """Tournament with alice, bob and carol registered."""
    return await tournament_service.create_tournament(
        session=db_session,
        name="Spring Open",
        start_date=date(2025, 4, 1),
        end_date=date(2025, 4, 3),
        created_by=master_user["id"],
        player_ids=[alice["id"], bob["id"], carol["id"]],
    )
