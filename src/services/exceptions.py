"""Exceptions raised by the bookmark persistence layer."""


class BookmarkValidationError(ValueError):
    """
    Raised when a bookmark is missing required fields or exceeds length limits.

    Raised before any storage access, so it is never worth retrying.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Invalid bookmark: " + "; ".join(errors))


class ConflictError(Exception):
    """Base exception for storage uniqueness violations."""

    pass


class BookmarkAlreadyExistsError(ConflictError):
    """Raised when inserting a bookmark whose URL is already stored."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Bookmark with URL '{url}' already exists")


class KeywordConflictError(ConflictError):
    """
    Raised when a concurrent transaction created one of the same new keywords.

    The losing transaction has been rolled back; retrying the whole operation
    will find the keyword and reuse it.
    """

    def __init__(self, labels: list[str]) -> None:
        self.labels = labels
        super().__init__(f"Concurrent creation of keyword(s): {', '.join(labels)}")


class StorageError(Exception):
    """Raised for any other persistence failure. The original error is chained."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
