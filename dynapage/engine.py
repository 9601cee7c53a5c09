"""
Pagination engine.

Two mutually exclusive strategies produce a PageResult:

- Native path (no sort field): one limited scan resuming from the store's own
  continuation key. Reads O(limit) items.
- Sorted path (any sort field): full scan, in-memory sort, slice starting at the
  item named by a positional cursor. Reads the whole table on every call.

Sorting by a field always takes the sorted path, even when the store has an
index on that field; the engine never issues index queries.
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from ._logging import logger, redact_value
from .cursor import CursorCodec, CursorStrategy, IdCursorStrategy, NativeCursor
from .entity import DynamoEntity
from .pagination import PageResult, validate_limit
from .sorting import DEFAULT_SORT_STRATEGY, SortOrder, SortStrategy
from .storage import StorageFacade

T = TypeVar("T", bound=DynamoEntity)


class PaginationEngine(Generic[T]):
    """
    Orchestrates the native and sorted scan strategies over a StorageFacade.

    The engine holds no per-request state: every call is computed from its
    arguments and whatever the store returns at call time, so one instance can
    serve concurrent callers.

    Usage:
        engine = PaginationEngine(DynamoTable("orders", Order, client))
        first = engine.paginate(limit=10, sort_by="createdAt", sort_order=SortOrder.DESC)
        second = engine.paginate(limit=10, cursor=first.next_cursor,
                                 sort_by="createdAt", sort_order=SortOrder.DESC)
    """

    def __init__(
        self,
        facade: StorageFacade[T],
        sort_strategy: SortStrategy | None = None,
        cursor_strategy: CursorStrategy[Any] | None = None,
        codec: CursorCodec | None = None,
    ) -> None:
        self.facade = facade
        self.codec = codec or CursorCodec()
        self.sort_strategy = sort_strategy or DEFAULT_SORT_STRATEGY
        self.cursor_strategy = cursor_strategy or IdCursorStrategy(self.codec)

    @property
    def table_name(self) -> str:
        return getattr(self.facade, "table_name", "unknown")

    def paginate(
        self,
        limit: int,
        cursor: str | None = None,
        sort_by: str | None = None,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> PageResult[T]:
        """
        Returns one page of the table.

        Args:
            limit: Page size, 1..100. Checked before any store call.
            cursor: next_cursor from a previous page, or None for the first page.
                    Unusable cursors restart from the first page.
            sort_by: Field to sort by. None or blank uses the native scan order.
            sort_order: Direction for sort_by.

        Raises:
            ValidationError: If limit is out of range
            DynapageError: Any store failure, unchanged
        """
        validate_limit(limit)

        if sort_by is None or not sort_by.strip():
            return self._scan_native(limit, cursor)
        return self._scan_sorted(limit, cursor, sort_by.strip(), SortOrder.from_string(sort_order))

    def _scan_native(self, limit: int, cursor: str | None) -> PageResult[T]:
        start_key = None
        if cursor:
            decoded = self.codec.decode(cursor) if self.codec.is_native(cursor) else None
            if isinstance(decoded, NativeCursor):
                start_key = decoded.to_native_key()
            else:
                logger.warning(
                    "Cursor is not a native cursor, scanning from the start",
                    extra={"table": self.table_name, "cursor_hash": redact_value(cursor)},
                )

        page = self.facade.scan_limited(limit, start_key)
        total_items = self.facade.approximate_item_count()

        next_cursor = None
        if page.last_evaluated_key:
            next_cursor = self.codec.encode_native(page.last_evaluated_key)

        result = PageResult(
            items=page.items,
            item_count=len(page.items),
            total_items=total_items,
            next_cursor=next_cursor,
            previous_cursor=cursor,
        )
        logger.debug(
            "Retrieved page via native scan",
            extra={
                "table": self.table_name,
                "strategy": "native",
                "item_count": result.item_count,
                "total_items": total_items,
                "has_next_page": result.has_next_page,
            },
        )
        return result

    def _scan_sorted(
        self, limit: int, cursor: str | None, sort_by: str, sort_order: SortOrder
    ) -> PageResult[T]:
        all_items = self.facade.scan_all()
        total_items = self.facade.approximate_item_count()
        ordered = self.sort_strategy.sort(all_items, sort_by, sort_order)

        result = self.paginate_slice(ordered, limit, cursor, total_items)
        logger.debug(
            "Retrieved page via sorted scan",
            extra={
                "table": self.table_name,
                "strategy": "sorted",
                "sort_field": sort_by,
                "sort_order": sort_order.value,
                "item_count": result.item_count,
                "total_items": total_items,
                "has_next_page": result.has_next_page,
            },
        )
        return result

    def paginate_slice(
        self, items: Sequence[T], limit: int, cursor: str | None, total_items: int
    ) -> PageResult[T]:
        """
        Cuts one page out of an in-memory sequence.

        The page starts at the item the cursor names (offset 0 without a cursor,
        or when the cursor is native, unparseable or names a missing item) and
        next_cursor names the first item after the page.
        """
        offset = 0
        if cursor:
            if self.codec.is_native(cursor):
                logger.warning(
                    "Native cursor on in-memory pagination, restarting from the first item",
                    extra={"table": self.table_name, "cursor_hash": redact_value(cursor)},
                )
            else:
                offset = self.cursor_strategy.resolve_offset(cursor, items)

        end = min(offset + limit, len(items))
        page_items = list(items[offset:end])
        next_cursor = self.cursor_strategy.encode(items[end]) if end < len(items) else None

        return PageResult(
            items=page_items,
            item_count=len(page_items),
            total_items=total_items,
            next_cursor=next_cursor,
            previous_cursor=cursor,
        )
