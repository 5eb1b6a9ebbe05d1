"""Keyword model and the bookmark/keyword junction table."""
from sqlalchemy import Column, ForeignKey, Index, Integer, String, Table, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


MAX_KEYWORD_LENGTH = 100

# Junction table for the many-to-many relationship between bookmarks and keywords.
# Rows are owned by the keyword store and replaced as a unit on every keyword update.
bookmark_keywords = Table(
    "bookmark_keywords",
    Base.metadata,
    Column(
        "bookmark_id",
        Integer,
        ForeignKey("bookmarks.id"),
        primary_key=True,
    ),
    Column(
        "keyword_id",
        Integer,
        ForeignKey("keywords.id"),
        primary_key=True,
    ),
    # Index for lookups by keyword (composite PK already indexes bookmark_id first)
    Index("ix_bookmark_keywords_keyword_id", "keyword_id"),
)


class Keyword(Base):
    """Keyword model - one row per distinct label, shared by all bookmarks."""

    __tablename__ = "keywords"
    __table_args__ = (
        UniqueConstraint("name", name="uq_keywords_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(MAX_KEYWORD_LENGTH), nullable=False)
