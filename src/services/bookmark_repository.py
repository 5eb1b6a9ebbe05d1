"""Bookmark persistence: CRUD over bookmarks and their keywords."""
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models.bookmark import Bookmark
from schemas.bookmark import BookmarkCreate, BookmarkResponse
from schemas.validators import collect_bookmark_errors, validate_and_normalize_keywords
from services.exceptions import (
    BookmarkAlreadyExistsError,
    BookmarkValidationError,
    ConflictError,
    StorageError,
)
from services.keyword_store import KeywordStore
from services.pager import NO_PAGER, NoPager, Pager


@dataclass(frozen=True)
class BookmarkFilter:
    """Restricts which bookmarks `list_bookmarks` returns."""

    id: int | None = None
    pager: Pager | NoPager | None = None


def _to_response(bookmark: Bookmark, keywords: list[str]) -> BookmarkResponse:
    return BookmarkResponse.model_validate(bookmark).model_copy(
        update={"keywords": keywords},
    )


class BookmarkRepository:
    """
    Stores bookmarks and their keywords in a relational database.

    Each mutating method runs in its own transaction, opened from the session
    factory and committed before returning; any failure rolls the whole
    operation back. The repository holds no state besides its collaborators,
    so a single instance can serve concurrent requests.

    Errors:
        - BookmarkValidationError: raised before any transaction is opened.
        - BookmarkAlreadyExistsError / KeywordConflictError: uniqueness
          violations (see `services.exceptions`).
        - StorageError: any other database failure, with the original
          SQLAlchemy error chained.
    A missing bookmark is reported as None / False, never as an exception.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        keyword_store: KeywordStore | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._logger = logger or logging.getLogger(__name__)
        self._keyword_store = keyword_store or KeywordStore(logger=self._logger)

    async def list_bookmarks(
        self,
        bookmark_filter: BookmarkFilter | None = None,
    ) -> tuple[list[BookmarkResponse], int]:
        """
        List bookmarks, optionally filtered by ID and paginated.

        Every matching row is read; the pager only decides which of them are
        returned, so the total is always the full match count. Keywords are
        loaded for returned bookmarks only.

        Returns:
            Tuple of (bookmarks on the requested page, total matching bookmarks).
        """
        bookmark_filter = bookmark_filter or BookmarkFilter()
        pager = bookmark_filter.pager or NO_PAGER

        query = select(Bookmark).order_by(Bookmark.id)
        if bookmark_filter.id is not None:
            query = query.where(Bookmark.id == bookmark_filter.id)

        bookmarks: list[BookmarkResponse] = []
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                rows = result.scalars().all()
                for index, bookmark in enumerate(rows):
                    if not pager.is_visible(index):
                        continue
                    keywords = await self._keyword_store.load(session, bookmark.id)
                    bookmarks.append(_to_response(bookmark, keywords))
        except SQLAlchemyError as e:
            raise StorageError("Failed to list bookmarks") from e

        return bookmarks, len(rows)

    async def by_id(self, bookmark_id: int) -> BookmarkResponse | None:
        """Get a bookmark by ID. Returns None if not found."""
        bookmarks, _ = await self.list_bookmarks(BookmarkFilter(id=bookmark_id))
        if not bookmarks:
            return None
        return bookmarks[0]

    async def insert(self, data: BookmarkCreate) -> BookmarkResponse:
        """
        Store a new bookmark with its keywords.

        The bookmark row and its keyword associations are written in one
        transaction: either all of them are stored or none is.

        Args:
            data: The bookmark to store. `added_date` defaults to now.

        Returns:
            The stored bookmark, with its generated ID.

        Raises:
            BookmarkValidationError: If required fields are missing or too long.
            BookmarkAlreadyExistsError: If a bookmark with this URL exists.
            KeywordConflictError: If a concurrent insert created the same new keyword.
            StorageError: For any other database failure.
        """
        errors = collect_bookmark_errors(
            data.url, data.title, data.author_name, data.keywords,
        )
        if errors:
            raise BookmarkValidationError(errors)

        bookmark = Bookmark(
            url=data.url,
            title=data.title,
            author_name=data.author_name,
            added_date=data.added_date or datetime.now(UTC),
            width=data.width,
            height=data.height,
            duration=data.duration,
        )
        try:
            async with self._session_factory.begin() as session:
                session.add(bookmark)
                try:
                    await session.flush()
                except IntegrityError as e:
                    # The unique constraint on url rejects duplicates
                    raise BookmarkAlreadyExistsError(data.url) from e

                keywords = await self._keyword_store.save(session, bookmark.id, data.keywords)
                created = _to_response(bookmark, keywords)
        except ConflictError as e:
            self._logger.warning("Bookmark insert rejected: %s", e)
            raise
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to insert bookmark '{data.url}'") from e

        self._logger.info("Inserted bookmark %d (%s)", created.id, created.url)
        return created

    async def update_keywords(self, bookmark_id: int, keywords: list[str]) -> bool:
        """
        Replace all keywords of a bookmark.

        This is a full replace, not a merge: keywords not in the new list lose
        their association (the keyword rows themselves are kept).

        Returns:
            True if the bookmark exists and was updated, False if not found.

        Raises:
            BookmarkValidationError: If a keyword is too long.
            KeywordConflictError: If a concurrent update created the same new keyword.
            StorageError: For any other database failure.
        """
        try:
            validate_and_normalize_keywords(keywords)
        except ValueError as e:
            raise BookmarkValidationError([str(e)]) from e

        try:
            async with self._session_factory.begin() as session:
                result = await session.execute(
                    select(Bookmark.id).where(Bookmark.id == bookmark_id),
                )
                if result.scalar_one_or_none() is None:
                    return False
                saved = await self._keyword_store.save(session, bookmark_id, keywords)
        except ConflictError as e:
            self._logger.warning("Keyword update of bookmark %d rejected: %s", bookmark_id, e)
            raise
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to update keywords of bookmark {bookmark_id}") from e

        self._logger.info("Updated keywords of bookmark %d: %s", bookmark_id, saved)
        return True

    async def delete(self, bookmark_id: int) -> bool:
        """
        Delete a bookmark and its keyword associations.

        Deleting a missing bookmark is not an error.

        Returns:
            True if a bookmark was deleted, False if there was none.
        """
        try:
            async with self._session_factory.begin() as session:
                # Associations first to keep the foreign keys satisfied
                await self._keyword_store.delete_associations(session, bookmark_id)
                result = await session.execute(
                    delete(Bookmark).where(Bookmark.id == bookmark_id),
                )
                deleted = result.rowcount > 0
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete bookmark {bookmark_id}") from e

        if deleted:
            self._logger.info("Deleted bookmark %d", bookmark_id)
        return deleted
