"""Fixtures for API tests."""
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from services.bookmark_repository import BookmarkRepository
from services.oembed import OEmbedLink, OEmbedNotFoundError


class FakeOEmbedFetcher:
    """Serves canned oEmbed links instead of calling providers."""

    def __init__(self) -> None:
        self.links: dict[str, OEmbedLink | Exception] = {}
        self.calls: list[str] = []

    async def fetch(self, url: str) -> OEmbedLink:
        self.calls.append(url)
        link = self.links.get(url)
        if link is None:
            raise OEmbedNotFoundError(url)
        if isinstance(link, Exception):
            raise link
        return link


@pytest.fixture
def oembed_fetcher() -> FakeOEmbedFetcher:
    return FakeOEmbedFetcher()


@pytest.fixture
def api_repository(
    session_factory: async_sessionmaker[AsyncSession],
) -> BookmarkRepository:
    """The repository the API tests run against; tests may replace it."""
    return BookmarkRepository(session_factory)


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    api_repository: BookmarkRepository,
    oembed_fetcher: FakeOEmbedFetcher,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with the startup dependencies overridden."""
    # Clear the settings cache so it picks up DATABASE_URL from environment
    from core.config import get_settings

    get_settings.cache_clear()

    from api.dependencies import (
        get_bookmark_repository,
        get_oembed_fetcher,
        get_session_factory,
    )
    from api.main import app

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_bookmark_repository] = lambda: api_repository
    app.dependency_overrides[get_oembed_fetcher] = lambda: oembed_fetcher

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
