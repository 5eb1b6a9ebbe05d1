"""Page arithmetic over an ordered result set."""
from dataclasses import dataclass


@dataclass(frozen=True)
class Pager:
    """
    A 1-based page of a fixed size over zero-based row indexes.

    Pages below 1 are rejected rather than clamped; callers reading a page
    number from a request normalize it first.
    """

    page: int
    page_size: int

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1 (got {self.page})")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1 (got {self.page_size})")

    def is_visible(self, index: int) -> bool:
        """Return True if the row at `index` belongs to this page."""
        start = (self.page - 1) * self.page_size
        return start <= index < start + self.page_size

    def page_of(self, index: int) -> int:
        """
        Return the 1-based page containing the row at `index`.

        `page_of(count - 1)` is the last page; for an empty result set
        (index -1) this is 0.
        """
        return index // self.page_size + 1

    def page_count(self, total: int) -> int:
        """Return the number of pages needed for `total` rows."""
        return self.page_of(total - 1)


class NoPager:
    """Pager used when no pagination is requested: every row is visible."""

    def is_visible(self, index: int) -> bool:  # noqa: ARG002
        """Every row is visible."""
        return True

    def page_of(self, index: int) -> int:
        """Everything is on page 1; an empty result set has 0 pages."""
        return 1 if index >= 0 else 0

    def page_count(self, total: int) -> int:
        """Return 1 for any non-empty result set."""
        return self.page_of(total - 1)


NO_PAGER = NoPager()
