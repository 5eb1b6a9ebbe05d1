"""Bookmark CRUD endpoints."""
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from api.dependencies import get_bookmark_repository, get_oembed_fetcher
from core.config import Settings, get_settings
from schemas.bookmark import BookmarkCreate, BookmarkListResponse, BookmarkResponse
from services.bookmark_repository import BookmarkFilter, BookmarkRepository
from services.exceptions import (
    BookmarkAlreadyExistsError,
    BookmarkValidationError,
    KeywordConflictError,
    StorageError,
)
from services.oembed import OEmbedError, OEmbedFetcher, OEmbedNotFoundError, apply_oembed
from services.pager import Pager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])

T = TypeVar("T")


async def retry_on_keyword_conflict(operation: Callable[[], Awaitable[T]]) -> T:
    """
    Run a repository write, retrying once if it lost a keyword creation race.

    The failed attempt was rolled back, so the retry sees the keyword created by
    the concurrent request and reuses it.
    """
    try:
        return await operation()
    except KeywordConflictError as e:
        logger.info("Retrying after keyword conflict on %s", e.labels)
        return await operation()


def _storage_error(e: StorageError) -> HTTPException:
    logger.error("Storage failure: %s", e, exc_info=e)
    return HTTPException(status_code=500, detail=str(e))


@router.get("/", response_model=BookmarkListResponse)
async def list_bookmarks(
    page: int = Query(default=1, description="1-based page number; values below 1 mean 1"),
    page_size: int | None = Query(default=None, ge=1, le=100, description="Bookmarks per page"),
    repo: BookmarkRepository = Depends(get_bookmark_repository),
    settings: Settings = Depends(get_settings),
) -> BookmarkListResponse:
    """List bookmarks one page at a time, ordered by ID."""
    # pages are 1-based to match the URL directly
    pager = Pager(page=max(page, 1), page_size=page_size or settings.items_per_page)
    try:
        bookmarks, total = await repo.list_bookmarks(BookmarkFilter(pager=pager))
    except StorageError as e:
        raise _storage_error(e)
    return BookmarkListResponse(
        items=bookmarks,
        total=total,
        page=pager.page,
        page_size=pager.page_size,
        last_page=pager.page_count(total),
    )


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: int,
    repo: BookmarkRepository = Depends(get_bookmark_repository),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    try:
        bookmark = await repo.by_id(bookmark_id)
    except StorageError as e:
        raise _storage_error(e)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return bookmark


@router.post("/", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    repo: BookmarkRepository = Depends(get_bookmark_repository),
    fetcher: OEmbedFetcher = Depends(get_oembed_fetcher),
) -> BookmarkResponse:
    """
    Create a bookmark.

    Missing title, author name and dimensions are filled in from the link's
    oEmbed provider before the bookmark is stored.
    """
    # Fetch before opening any transaction
    try:
        link = await fetcher.fetch(data.url)
    except OEmbedNotFoundError as e:
        raise HTTPException(status_code=424, detail=str(e))
    except OEmbedError as e:
        logger.warning("oEmbed fetch failed for %s: %s", data.url, e)
        raise HTTPException(status_code=502, detail=str(e))

    data = apply_oembed(data, link)
    try:
        return await retry_on_keyword_conflict(lambda: repo.insert(data))
    except BookmarkValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)
    except BookmarkAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except KeywordConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError as e:
        raise _storage_error(e)


@router.put("/{bookmark_id}/keywords", response_model=BookmarkResponse)
async def update_bookmark_keywords(
    bookmark_id: int,
    keywords: list[str] = Body(..., description="The complete new keyword list"),
    repo: BookmarkRepository = Depends(get_bookmark_repository),
) -> BookmarkResponse:
    """Replace the keywords of a bookmark."""
    try:
        updated = await retry_on_keyword_conflict(
            lambda: repo.update_keywords(bookmark_id, keywords),
        )
        bookmark = await repo.by_id(bookmark_id) if updated else None
    except BookmarkValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)
    except KeywordConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError as e:
        raise _storage_error(e)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return bookmark


@router.delete("/{bookmark_id}", response_model=BookmarkResponse)
async def delete_bookmark(
    bookmark_id: int,
    repo: BookmarkRepository = Depends(get_bookmark_repository),
) -> BookmarkResponse:
    """Delete a bookmark and return it as it was before deletion."""
    try:
        bookmark = await repo.by_id(bookmark_id)
        if bookmark is None:
            raise HTTPException(status_code=404, detail="Bookmark not found")
        await repo.delete(bookmark_id)
    except StorageError as e:
        raise _storage_error(e)
    return bookmark
