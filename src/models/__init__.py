"""SQLAlchemy models."""
from models.base import Base
from models.keyword import Keyword, bookmark_keywords
from models.bookmark import Bookmark

__all__ = [
    "Base",
    "Bookmark",
    "Keyword",
    "bookmark_keywords",
]
