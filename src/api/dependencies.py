"""FastAPI dependencies for injection."""
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from services.bookmark_repository import BookmarkRepository
from services.oembed import OEmbedFetcher


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Return the session factory created at startup."""
    return request.app.state.session_factory


def get_bookmark_repository(request: Request) -> BookmarkRepository:
    """Return the bookmark repository created at startup."""
    return request.app.state.bookmark_repository


def get_oembed_fetcher(request: Request) -> OEmbedFetcher:
    """Return the oEmbed fetcher created at startup."""
    return request.app.state.oembed_fetcher
