"""Keyword reconciliation and bookmark/keyword association management."""
import logging
from collections.abc import Iterable

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.keyword import Keyword, bookmark_keywords
from schemas.validators import validate_and_normalize_keywords
from services.exceptions import KeywordConflictError


class KeywordStore:
    """
    Maps keyword labels to keyword rows and maintains per-bookmark associations.

    Every method runs inside the session (and transaction) owned by the caller
    and never commits. Storage errors propagate so the caller's transaction is
    rolled back as a whole.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    async def resolve(
        self,
        session: AsyncSession,
        labels: Iterable[str],
    ) -> dict[str, int]:
        """
        Resolve keyword labels to keyword IDs, creating missing keywords.

        Existing keywords are fetched in a single query; a new row is created
        for every label that has none.

        Args:
            session: Database session with an open transaction.
            labels: Distinct, normalized keyword labels.

        Returns:
            Mapping of every input label to its keyword ID.

        Raises:
            KeywordConflictError: If another transaction created one of the new
                labels first (unique constraint on keywords.name).
        """
        labels = list(dict.fromkeys(labels))
        if not labels:
            return {}

        resolved = await self.find_existing(session, labels)

        missing = [label for label in labels if label not in resolved]
        if missing:
            new_keywords = [Keyword(name=label) for label in missing]
            session.add_all(new_keywords)
            try:
                # Flush to get the generated IDs back
                await session.flush()
            except IntegrityError as e:
                # Only keyword rows are pending here, so this is the label race
                self._logger.warning(
                    "Keyword creation lost a race on labels %s", missing,
                )
                raise KeywordConflictError(missing) from e
            for keyword in new_keywords:
                resolved[keyword.name] = keyword.id
            self._logger.debug("Created %d new keyword(s): %s", len(missing), missing)

        return resolved

    async def find_existing(self, session: AsyncSession, labels: list[str]) -> dict[str, int]:
        """Return the IDs of the labels that already have a keyword row, in one query."""
        result = await session.execute(
            select(Keyword.id, Keyword.name).where(Keyword.name.in_(labels)),
        )
        return {row.name: row.id for row in result}

    async def replace_associations(
        self,
        session: AsyncSession,
        bookmark_id: int,
        keyword_ids: Iterable[int],
    ) -> None:
        """
        Replace all keyword associations of a bookmark.

        Existing rows are deleted and one row is inserted per keyword ID. This
        is a full replace: association rows are not preserved across updates.
        """
        await self.delete_associations(session, bookmark_id)

        keyword_ids = list(dict.fromkeys(keyword_ids))
        if not keyword_ids:
            # nothing more to do
            return

        await session.execute(
            insert(bookmark_keywords),
            [
                {"bookmark_id": bookmark_id, "keyword_id": keyword_id}
                for keyword_id in keyword_ids
            ],
        )

    async def save(
        self,
        session: AsyncSession,
        bookmark_id: int,
        labels: list[str],
    ) -> list[str]:
        """
        Set a bookmark's keywords to exactly `labels`.

        Returns:
            The normalized labels now associated with the bookmark.

        Raises:
            ValueError: If a label is too long.
            KeywordConflictError: See `resolve`.
        """
        normalized = validate_and_normalize_keywords(labels)
        ids = await self.resolve(session, normalized)
        await self.replace_associations(
            session, bookmark_id, [ids[label] for label in normalized],
        )
        return normalized

    async def load(self, session: AsyncSession, bookmark_id: int) -> list[str]:
        """Return the labels associated with a bookmark (order is not significant)."""
        result = await session.execute(
            select(Keyword.name)
            .join(bookmark_keywords, Keyword.id == bookmark_keywords.c.keyword_id)
            .where(bookmark_keywords.c.bookmark_id == bookmark_id),
        )
        return list(result.scalars())

    async def delete_associations(self, session: AsyncSession, bookmark_id: int) -> None:
        """Remove every association row of a bookmark. Keyword rows are kept."""
        await session.execute(
            delete(bookmark_keywords).where(bookmark_keywords.c.bookmark_id == bookmark_id),
        )
