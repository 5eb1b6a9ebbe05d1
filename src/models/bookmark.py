"""Bookmark model for storing bookmarked links."""
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


MAX_URL_LENGTH = 255
MAX_TITLE_LENGTH = 100
MAX_AUTHOR_NAME_LENGTH = 100


class Bookmark(Base):
    """
    Bookmark model - stores a link with its oEmbed metadata.

    Keywords live in the bookmark_keywords junction table and are managed
    explicitly by the keyword store rather than through an ORM relationship.
    """

    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint("url", name="uq_bookmarks_url"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    url: Mapped[str] = mapped_column(String(MAX_URL_LENGTH), nullable=False)
    title: Mapped[str] = mapped_column(String(MAX_TITLE_LENGTH), nullable=False)
    author_name: Mapped[str] = mapped_column(String(MAX_AUTHOR_NAME_LENGTH), nullable=False)
    added_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Link-dependent properties (photos have a size, videos also have a duration)
    width: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    height: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
