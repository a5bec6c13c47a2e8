"""
Pytest configuration and fixtures.

Provides fixtures for:
- An in-memory SQLite database shared by the app and the test
- HTTP client with rate limiting disabled
- Test users (regular, second regular, moderator, admin) with auth headers
- A trade, forum post and event owned by the first test user
"""
import os
import tempfile
from datetime import timedelta
from typing import AsyncGenerator

# Settings are read at import time, so the environment comes first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["API_DEBUG"] = "true"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="bloxmarket-uploads-")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bloxmarket.core.constants import UserRole
from bloxmarket.db.base import Base, utcnow
from bloxmarket.db.session import get_db
from bloxmarket.main import app
import bloxmarket.models  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, sharing the test session."""

    async def override_get_db():
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# -----------------------------------------------------------------------------
# User Fixtures
# -----------------------------------------------------------------------------

async def create_user(
    db: AsyncSession,
    username: str,
    role: UserRole = UserRole.USER,
    password: str = "password123",
    **fields,
):
    from bloxmarket.models import User
    from bloxmarket.services.auth import get_password_hash

    user = User(
        username=username,
        email=f"{username.lower()}@example.com",
        hashed_password=get_password_hash(password),
        role=role.value,
        **fields,
    )
    db.add(user)
    await db.commit()
    return user


async def headers_for(db: AsyncSession, user) -> dict:
    from bloxmarket.services.auth import create_session

    token = await create_session(db, user)
    await db.commit()
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(db_session):
    """Create a test user."""
    return await create_user(db_session, "trader_one", roblox_username="TraderOne")


@pytest_asyncio.fixture
async def test_user_2(db_session):
    """Create a second test user for voting and vouching scenarios."""
    return await create_user(db_session, "trader_two")


@pytest_asyncio.fixture
async def moderator_user(db_session):
    return await create_user(db_session, "mod_user", role=UserRole.MODERATOR)


@pytest_asyncio.fixture
async def admin_user(db_session):
    return await create_user(db_session, "admin_user", role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def auth_headers(db_session, test_user) -> dict:
    """Get auth headers for test user."""
    return await headers_for(db_session, test_user)


@pytest_asyncio.fixture
async def auth_headers_2(db_session, test_user_2) -> dict:
    """Get auth headers for second test user."""
    return await headers_for(db_session, test_user_2)


@pytest_asyncio.fixture
async def moderator_headers(db_session, moderator_user) -> dict:
    return await headers_for(db_session, moderator_user)


@pytest_asyncio.fixture
async def admin_headers(db_session, admin_user) -> dict:
    return await headers_for(db_session, admin_user)


# -----------------------------------------------------------------------------
# Content Fixtures
# -----------------------------------------------------------------------------

@pytest_asyncio.fixture
async def test_trade(db_session, test_user):
    """An open trade owned by test_user."""
    from bloxmarket.services.trades import TradeService

    trade = await TradeService(db_session).create(
        test_user,
        item_offered="Dominus Empyreus",
        item_requested="Valkyrie Helm",
        description="Looking for an even swap",
        trade_value=50000,
    )
    await db_session.commit()
    return trade


@pytest_asyncio.fixture
async def test_post(db_session, test_user):
    """A general forum post owned by test_user."""
    from bloxmarket.services.forum import ForumService

    post = await ForumService(db_session).create(
        test_user,
        title="Best way to value limiteds?",
        content="How do you all price older limiteds?",
    )
    await db_session.commit()
    return post


@pytest_asyncio.fixture
async def test_event(db_session, test_user):
    """An event running for the next three days, owned by test_user."""
    from bloxmarket.services.events import EventService

    now = utcnow()
    event = await EventService(db_session).create(
        test_user,
        title="Weekend Giveaway",
        description="Free limiteds for three lucky traders",
        starts_at=now - timedelta(hours=1),
        ends_at=now + timedelta(days=3),
        event_type="giveaway",
        prize="Sparkle Time Fedora",
        max_participants=2,
    )
    await db_session.commit()
    return event


@pytest.fixture
def png_upload():
    """A minimal PNG payload for multipart uploads."""
    return ("proof.png", PNG_BYTES, "image/png")


@pytest.fixture
def user_factory(db_session):
    """Create extra users with arbitrary role and status fields."""

    async def factory(username: str, role: UserRole = UserRole.USER, **fields):
        return await create_user(db_session, username, role=role, **fields)

    return factory


@pytest.fixture
def login_headers(db_session):
    """Issue a session for any user and return its auth headers."""

    async def factory(user) -> dict:
        return await headers_for(db_session, user)

    return factory
