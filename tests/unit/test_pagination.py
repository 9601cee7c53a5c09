"""
Unit tests for pagination functionality.

Tests the PageResult dataclass, limit validation and PageQuery parameters.
"""

import pydantic
import pytest

from dynapage.exceptions import ValidationError
from dynapage.pagination import MAX_LIMIT, MIN_LIMIT, PageQuery, PageResult, validate_limit
from dynapage.sorting import SortOrder


@pytest.mark.unit
class TestPageResult:
    """Test the PageResult dataclass."""

    def test_item_count_defaults_to_items_length(self):
        page = PageResult(items=[1, 2, 3])
        assert page.item_count == 3

    def test_has_next_page(self):
        page = PageResult(items=[1], next_cursor="abc")
        assert page.has_next_page is True
        assert page.has_more is True
        assert page.is_last_page is False

    def test_last_page(self):
        page = PageResult(items=[1])
        assert page.has_next_page is False
        assert page.is_last_page is True

    def test_has_previous_page_follows_previous_cursor(self):
        assert PageResult(items=[], previous_cursor="c").has_previous_page is True
        assert PageResult(items=[]).has_previous_page is False

    def test_empty(self):
        page = PageResult.empty()
        assert page.items == []
        assert page.item_count == 0
        assert page.total_items == 0
        assert page.next_cursor is None
        assert page.previous_cursor is None

    def test_of(self):
        page = PageResult.of([1, 2], total_items=10)
        assert page.item_count == 2
        assert page.total_items == 10
        assert page.has_next_page is False

    def test_map_keeps_cursors(self):
        page = PageResult(items=[1, 2], total_items=7, next_cursor="n", previous_cursor="p")
        mapped = page.map(lambda value: value * 10)

        assert mapped.items == [10, 20]
        assert mapped.item_count == 2
        assert mapped.total_items == 7
        assert mapped.next_cursor == "n"
        assert mapped.previous_cursor == "p"

    def test_filter_recounts_items(self):
        page = PageResult(items=[1, 2, 3, 4], total_items=4, next_cursor="n")
        filtered = page.filter(lambda value: value % 2 == 0)

        assert filtered.items == [2, 4]
        assert filtered.item_count == 2
        assert filtered.next_cursor == "n"


@pytest.mark.unit
class TestValidateLimit:
    @pytest.mark.parametrize("limit", [MIN_LIMIT, 10, MAX_LIMIT])
    def test_accepts_bounds(self, limit):
        assert validate_limit(limit) == limit

    @pytest.mark.parametrize("limit", [0, -1, 101, 1000, "10", 10.0, None, True])
    def test_rejects(self, limit):
        with pytest.raises(ValidationError) as exc_info:
            validate_limit(limit)

        assert exc_info.value.field == "limit"
        assert exc_info.value.value == limit


@pytest.mark.unit
class TestPageQuery:
    def test_defaults(self):
        query = PageQuery()
        assert query.limit == 10
        assert query.cursor is None
        assert query.sort_by is None
        assert query.sort_order is SortOrder.ASC

    def test_sort_order_from_string(self):
        assert PageQuery(sort_order="descending").sort_order is SortOrder.DESC
        assert PageQuery(sort_order="whatever").sort_order is SortOrder.ASC

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_bounds(self, limit):
        with pytest.raises(pydantic.ValidationError):
            PageQuery(limit=limit)
