"""Shared fixtures for player link tests.

Database tests run against an in-memory SQLite database (aiosqlite) with a
StaticPool, so every session in a test shares the same connection and
sees the same tables.
"""

import uuid
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from playerlink.core.database import create_session_factory, create_tables
from playerlink.models import PendingLinkRequest
from playerlink.repositories.link_request_repository import LinkRequestRepository
from playerlink.services.player_link import DatabasePlayerLink

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed "now" for deterministic expiry tests
TEST_NOW = 1_700_000_000
TEST_TIMEOUT = 300

# Primary (Java-side) and secondary (Bedrock-side) identities
PRIMARY_ID = uuid.UUID("00000000-0000-0000-0000-00000000000a")
SECONDARY_ID = uuid.UUID("00000000-0000-0000-0009-00000000000b")
OTHER_PRIMARY_ID = uuid.UUID("00000000-0000-0000-0000-00000000000c")
OTHER_SECONDARY_ID = uuid.UUID("00000000-0000-0000-0009-00000000000d")


class FakeClock:
    """Settable clock returning whole seconds since the epoch."""

    def __init__(self, now: int = TEST_NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory database with the player link tables."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return create_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock() -> FakeClock:
    """Clock pinned to TEST_NOW."""
    return FakeClock()


@pytest.fixture
def player_link(db_engine: AsyncEngine, clock: FakeClock) -> DatabasePlayerLink:
    """Database player link backend on the test engine."""
    return DatabasePlayerLink(
        db_engine,
        link_request_timeout=TEST_TIMEOUT,
        clock=clock,
    )


async def fetch_request(
    session_factory: async_sessionmaker[AsyncSession], primary_username: str
) -> PendingLinkRequest | None:
    """Read a pending request in a fresh session."""
    async with session_factory() as session:
        return await LinkRequestRepository.get(session, primary_username)
