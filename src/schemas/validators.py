"""
Shared validation functions for bookmark schemas and the bookmark repository.

Length limits mirror the column sizes declared on the models so that a bookmark
that passes validation can always be stored.
"""
from datetime import UTC, datetime

from models.bookmark import MAX_AUTHOR_NAME_LENGTH, MAX_TITLE_LENGTH, MAX_URL_LENGTH
from models.keyword import MAX_KEYWORD_LENGTH


def validate_and_normalize_keyword(keyword: str) -> str:
    """
    Normalize and validate a single keyword.

    Args:
        keyword: The keyword label to validate.

    Returns:
        The normalized keyword (trimmed, case preserved).

    Raises:
        ValueError: If the keyword is empty or too long.
    """
    normalized = keyword.strip()
    if not normalized:
        raise ValueError("Keyword cannot be empty")
    if len(normalized) > MAX_KEYWORD_LENGTH:
        raise ValueError(
            f"Keyword exceeds maximum length of {MAX_KEYWORD_LENGTH} characters "
            f"(got {len(normalized)} characters).",
        )
    return normalized


def validate_and_normalize_keywords(keywords: list[str]) -> list[str]:
    """
    Normalize and validate a list of keywords.

    Args:
        keywords: List of keyword labels to validate.

    Returns:
        List of normalized keywords with empty labels filtered out and
        duplicates removed (preserving first occurrence order).

    Raises:
        ValueError: If any keyword is too long.
    """
    normalized = []
    seen: set[str] = set()
    for keyword in keywords:
        if not keyword.strip():
            continue  # Skip empty keywords silently
        validated = validate_and_normalize_keyword(keyword)
        if validated not in seen:
            seen.add(validated)
            normalized.append(validated)
    return normalized


def _check_required(name: str, value: str, max_length: int) -> str | None:
    if not value or not value.strip():
        return f"{name} is required"
    if len(value) > max_length:
        return (
            f"{name} exceeds maximum length of {max_length} characters "
            f"(got {len(value)} characters)"
        )
    return None


def collect_bookmark_errors(
    url: str,
    title: str,
    author_name: str,
    keywords: list[str],
) -> list[str]:
    """
    Check the fields a bookmark needs before it can be stored.

    Returns:
        A list of human readable problems; empty when the bookmark is valid.
    """
    errors = [
        error
        for error in (
            _check_required("url", url, MAX_URL_LENGTH),
            _check_required("title", title, MAX_TITLE_LENGTH),
            _check_required("author_name", author_name, MAX_AUTHOR_NAME_LENGTH),
        )
        if error is not None
    ]
    try:
        validate_and_normalize_keywords(keywords)
    except ValueError as e:
        errors.append(str(e))
    return errors


def ensure_utc(value: datetime | None) -> datetime | None:
    """
    Return the same instant in UTC.

    Naive datetimes are taken to be UTC already: SQLite hands back stored
    timestamps without their timezone.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
