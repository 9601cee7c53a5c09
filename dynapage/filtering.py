"""
Generic search over a full table scan.

Property lookups compare one named property by equality; predicate scans apply
any caller-supplied function. Both read the whole table on every call.
"""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from ._logging import logger
from .engine import PaginationEngine
from .entity import Accessor, DynamoEntity
from .pagination import PageResult, validate_limit
from .storage import StorageFacade

T = TypeVar("T", bound=DynamoEntity)

Predicate = Callable[[T], bool]


class FilterEngine(Generic[T]):
    """
    Equality lookups and predicate scans, paginated through the same slicing
    as the engine's sorted path.

    Usage:
        filters = FilterEngine(table, engine, Order)
        pending = filters.find_all_by_property("status", "PENDING")
        page = filters.scan_filtered_paginated(20, None, lambda o: o.total > 100)
    """

    def __init__(
        self, facade: StorageFacade[T], engine: PaginationEngine[T], entity_cls: type[T]
    ) -> None:
        self.facade = facade
        self.engine = engine
        self.entity_cls = entity_cls

    def _accessor(self, name: str) -> Accessor | None:
        accessor = self.entity_cls.accessor_for(name)
        if accessor is None:
            logger.warning(
                "Unknown property, no items will match",
                extra={
                    "table": self.facade.table_name,
                    "property": name,
                    "entity": self.entity_cls.__name__,
                },
            )
        return accessor

    def _matches(self, item: T, name: str, accessor: Accessor, value: Any) -> bool:
        try:
            current = accessor(item)
        except AttributeError:
            logger.warning(
                "Property not readable on item, excluding it",
                extra={"table": self.facade.table_name, "property": name},
            )
            return False
        return current == value

    def find_by_property(self, name: str, value: Any) -> T | None:
        """Returns the first scanned item whose property equals value, or None."""
        accessor = self._accessor(name)
        if accessor is None:
            return None

        found = next(
            (item for item in self.facade.scan_all() if self._matches(item, name, accessor, value)),
            None,
        )
        logger.debug(
            "Find by property finished",
            extra={"table": self.facade.table_name, "property": name, "found": found is not None},
        )
        return found

    def find_all_by_property(self, name: str, value: Any) -> list[T]:
        """Returns every scanned item whose property equals value."""
        accessor = self._accessor(name)
        if accessor is None:
            return []

        matches = [
            item for item in self.facade.scan_all() if self._matches(item, name, accessor, value)
        ]
        logger.debug(
            "Find all by property finished",
            extra={"table": self.facade.table_name, "property": name, "count": len(matches)},
        )
        return matches

    def scan_filtered(self, predicate: Predicate[T]) -> list[T]:
        """Full scan keeping the items the predicate accepts, in scan order."""
        matches = [item for item in self.facade.scan_all() if predicate(item)]
        logger.debug(
            "Scan with filter finished",
            extra={"table": self.facade.table_name, "count": len(matches)},
        )
        return matches

    def scan_filtered_paginated(
        self, limit: int, cursor: str | None, predicate: Predicate[T]
    ) -> PageResult[T]:
        """
        Full scan, filter, then one page of the filtered sequence.

        Unlike table pagination, total_items is the number of items that matched
        the predicate, not the table's item count.

        Raises:
            ValidationError: If limit is out of range (before any store call)
        """
        validate_limit(limit)

        filtered = self.scan_filtered(predicate)
        result = self.engine.paginate_slice(filtered, limit, cursor, total_items=len(filtered))
        logger.debug(
            "Retrieved filtered page",
            extra={
                "table": self.facade.table_name,
                "strategy": "filtered",
                "item_count": result.item_count,
                "total_items": result.total_items,
                "has_next_page": result.has_next_page,
            },
        )
        return result
