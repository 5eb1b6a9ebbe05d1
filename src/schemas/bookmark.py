"""Pydantic schemas for bookmarks."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.validators import ensure_utc


class BookmarkCreate(BaseModel):
    """
    Schema for creating a new bookmark.

    Title and author name may be left empty by API clients: they are filled in
    from oEmbed before the bookmark is stored. The repository rejects the
    bookmark if they are still missing at insert time.
    """

    url: str
    title: str = ""
    author_name: str = ""
    added_date: datetime | None = None
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    duration: int = Field(default=0, ge=0)
    keywords: list[str] = []

    @field_validator("keywords", mode="before")
    @classmethod
    def default_keywords(cls, v: list[str] | None) -> list[str]:
        """Treat a null keyword list as empty."""
        if v is None:
            return []
        return v

    @field_validator("added_date")
    @classmethod
    def added_date_in_utc(cls, v: datetime | None) -> datetime | None:
        """Store every timestamp in UTC."""
        return ensure_utc(v)


class BookmarkResponse(BaseModel):
    """Schema for a persisted bookmark, including its keywords."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    title: str
    author_name: str
    added_date: datetime
    width: int = 0
    height: int = 0
    duration: int = 0
    keywords: list[str] = []

    @field_validator("added_date")
    @classmethod
    def added_date_in_utc(cls, v: datetime) -> datetime:
        """Attach UTC to timestamps the database returned without a timezone."""
        return ensure_utc(v)


class BookmarkListResponse(BaseModel):
    """Schema for a page of bookmarks."""

    items: list[BookmarkResponse]
    total: int
    page: int
    page_size: int
    last_page: int
