"""Tests for page arithmetic."""
import pytest

from services.pager import NO_PAGER, Pager


def test__is_visible__first_page() -> None:
    pager = Pager(page=1, page_size=5)
    assert [i for i in range(12) if pager.is_visible(i)] == [0, 1, 2, 3, 4]


def test__is_visible__second_page_of_twelve_rows() -> None:
    """Page 2 of size 5 covers zero-based indexes 5 to 9."""
    pager = Pager(page=2, page_size=5)
    assert [i for i in range(12) if pager.is_visible(i)] == [5, 6, 7, 8, 9]


def test__is_visible__partial_last_page() -> None:
    pager = Pager(page=3, page_size=5)
    assert [i for i in range(12) if pager.is_visible(i)] == [10, 11]


def test__is_visible__page_past_the_end_shows_nothing() -> None:
    pager = Pager(page=4, page_size=5)
    assert not any(pager.is_visible(i) for i in range(12))


@pytest.mark.parametrize(
    ("index", "expected_page"),
    [(0, 1), (4, 1), (5, 2), (9, 2), (10, 3), (11, 3)],
)
def test__page_of(index: int, expected_page: int) -> None:
    assert Pager(page=1, page_size=5).page_of(index) == expected_page


def test__page_of__empty_result_set_is_zero_pages() -> None:
    """page_of(count - 1) with count 0 means no pages, not an error."""
    assert Pager(page=1, page_size=5).page_of(-1) == 0


def test__page_count() -> None:
    pager = Pager(page=1, page_size=5)
    assert pager.page_count(0) == 0
    assert pager.page_count(5) == 1
    assert pager.page_count(6) == 2
    assert pager.page_count(12) == 3


@pytest.mark.parametrize(("page", "page_size"), [(0, 5), (-1, 5), (1, 0)])
def test__pager__rejects_invalid_values(page: int, page_size: int) -> None:
    """Normalizing out-of-range pages is the caller's job."""
    with pytest.raises(ValueError):  # noqa: PT011
        Pager(page=page, page_size=page_size)


def test__no_pager__everything_visible() -> None:
    assert all(NO_PAGER.is_visible(i) for i in range(100))
    assert NO_PAGER.page_count(0) == 0
    assert NO_PAGER.page_count(100) == 1
