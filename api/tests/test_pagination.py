"""Unit tests for pagination.Page and compute_total_pages."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pagination import Page, compute_total_pages

pytestmark = pytest.mark.unit


class TestComputeTotalPages:
    @pytest.mark.parametrize(
        ("total", "size", "expected"),
        [(0, 25, 0), (1, 25, 1), (25, 25, 1), (26, 25, 2), (5, 2, 3)],
    )
    def test_ceiling_division(self, total: int, size: int, expected: int):
        assert compute_total_pages(total_elements=total, page_size=size) == expected

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            compute_total_pages(total_elements=3, page_size=0)

    @given(
        total=st.integers(min_value=0, max_value=10_000),
        size=st.integers(min_value=1, max_value=1000),
    )
    def test_pages_cover_every_element_once(self, total: int, size: int):
        pages = compute_total_pages(total_elements=total, page_size=size)

        assert pages * size >= total
        assert (pages - 1) * size < total or pages == 0


class TestPage:
    def test_defaults_describe_empty_set(self):
        page = Page()

        assert list(page.content) == []
        assert page.total_pages == 0
        assert page.offset == 0

    def test_offset(self):
        assert Page(page_number=3, page_size=20).offset == 60

    def test_map_keeps_numbering(self):
        page = Page(content=(1, 2), page_number=1, page_size=2, total_elements=5)

        mapped = page.map(str)

        assert mapped.content == ("1", "2")
        assert mapped.page_number == 1
        assert mapped.total_elements == 5
        assert mapped.total_pages == 3

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"page_number": -1},
            {"page_size": 0},
            {"content": (1, 2, 3), "page_size": 2, "total_elements": 3},
            {"content": (1, 2), "page_size": 5, "total_elements": 1},
        ],
    )
    def test_rejects_inconsistent_pages(self, kwargs: dict):
        with pytest.raises(ValueError):
            Page(**kwargs)

    def test_is_immutable(self):
        page = Page()

        with pytest.raises(AttributeError):
            page.page_number = 2  # type: ignore[misc]
