"""
Pagination support for dynapage.

This module provides the page container returned to callers and the validation
of page request parameters, so web backends can hand opaque cursors to
frontends and accept them back.
"""

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, field_validator

from .exceptions import ValidationError
from .sorting import SortOrder

T = TypeVar("T")
R = TypeVar("R")

MIN_LIMIT = 1
MAX_LIMIT = 100
DEFAULT_LIMIT = 10


def validate_limit(limit: Any) -> int:
    """Raises ValidationError unless limit is an int within [MIN_LIMIT, MAX_LIMIT]."""
    if isinstance(limit, bool) or not isinstance(limit, int) or not (
        MIN_LIMIT <= limit <= MAX_LIMIT
    ):
        raise ValidationError(
            f"Limit must be between {MIN_LIMIT} and {MAX_LIMIT}", field="limit", value=limit
        )
    return limit


@dataclass
class PageResult(Generic[T]):
    """
    Represents a single page of results with pagination cursors.

    Attributes:
        items: Entities in this page, in page order
        item_count: Number of items in this page (defaults to len(items))
        total_items: Best-effort total. For table pagination this is the table's
            approximate item count; for filtered pagination it is the number of
            items that matched the filter.
        next_cursor: Opaque cursor for the next page (None if no more pages)
        previous_cursor: The cursor the caller supplied for this page, echoed back.
            It signals that an earlier page exists; it is not recomputed.
    """

    items: list[T]
    item_count: int | None = None
    total_items: int = 0
    next_cursor: str | None = None
    previous_cursor: str | None = None

    def __post_init__(self) -> None:
        if self.item_count is None:
            self.item_count = len(self.items)

    @property
    def has_next_page(self) -> bool:
        return self.next_cursor is not None

    @property
    def has_previous_page(self) -> bool:
        return self.previous_cursor is not None

    @property
    def has_more(self) -> bool:
        """Alias of has_next_page."""
        return self.has_next_page

    @property
    def is_last_page(self) -> bool:
        return not self.has_next_page

    def map(self, transform: Callable[[T], R]) -> "PageResult[R]":
        """Returns a page with every item transformed, cursors and total unchanged."""
        return PageResult(
            items=[transform(item) for item in self.items],
            total_items=self.total_items,
            next_cursor=self.next_cursor,
            previous_cursor=self.previous_cursor,
        )

    def filter(self, predicate: Callable[[T], bool]) -> "PageResult[T]":
        kept = [item for item in self.items if predicate(item)]
        return replace(self, items=kept, item_count=len(kept))

    @classmethod
    def empty(cls) -> "PageResult[Any]":
        return cls(items=[], item_count=0, total_items=0)

    @classmethod
    def of(cls, items: list[T], total_items: int = 0) -> "PageResult[T]":
        return cls(items=list(items), total_items=total_items)


class PageQuery(BaseModel):
    """
    Validated page request parameters, e.g. parsed from a query string.

    Usage:
        query = PageQuery(limit=20, sort_by="createdAt", sort_order="desc")
        page = repository.paginate(query)
    """

    limit: int = Field(default=DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT)
    cursor: str | None = None
    sort_by: str | None = None
    sort_order: SortOrder = SortOrder.ASC

    @field_validator("sort_order", mode="before")
    @classmethod
    def _parse_sort_order(cls, value: Any) -> SortOrder:
        return SortOrder.from_string(value)
