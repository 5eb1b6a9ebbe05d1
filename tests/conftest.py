"""Pytest fixtures for testing."""
import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

# Must be set before any app imports that trigger Settings validation
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest  # noqa: E402
from sqlalchemy import event, func, select  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from models import Base, Bookmark  # noqa: E402
from services.bookmark_repository import BookmarkRepository  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class SpySessionFactory:
    """
    Wraps a session factory and counts the sessions and transactions it opens.

    Lets tests assert that an operation failed before touching storage.
    """

    def __init__(self, factory: async_sessionmaker[AsyncSession]) -> None:
        self._factory = factory
        self.sessions_opened = 0
        self.transactions_opened = 0

    def __call__(self, **kwargs: Any) -> AsyncSession:
        self.sessions_opened += 1
        return self._factory(**kwargs)

    def begin(self) -> Any:
        self.transactions_opened += 1
        return self._factory.begin()


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """
    Create an in-memory SQLite engine with the schema created.

    StaticPool keeps a single connection so every session sees the same database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def spy_session_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> SpySessionFactory:
    """Session factory that records how many sessions and transactions were opened."""
    return SpySessionFactory(session_factory)


@pytest.fixture
def repository(spy_session_factory: SpySessionFactory) -> BookmarkRepository:
    """Bookmark repository backed by the test database."""
    return BookmarkRepository(spy_session_factory)  # type: ignore[arg-type]


@pytest.fixture
def count_rows(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[Any], Awaitable[int]]:
    """Return a helper counting the committed rows of a table or model."""

    async def _count(table: Any) -> int:
        async with session_factory() as session:
            return await session.scalar(select(func.count()).select_from(table))

    return _count


@pytest.fixture
def add_bookmark(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[int]]:
    """Return a helper that stores a bookmark row directly and returns its ID."""

    async def _add(url: str, **fields: Any) -> int:
        values = {
            "title": "A title",
            "author_name": "An author",
            "added_date": datetime(2024, 1, 1, tzinfo=UTC),
            **fields,
        }
        async with session_factory.begin() as session:
            bookmark = Bookmark(url=url, **values)
            session.add(bookmark)
            await session.flush()
            return bookmark.id

    return _add
