"""
Sort strategies for the in-memory (sorted) pagination path.

A strategy maps a field name to a key function. The default strategy knows the
fields every DynamoEntity has; repositories supply their own strategy to sort
by entity-specific fields such as ``price``.
"""

from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Any, Protocol, TypeVar

from ._logging import logger

T = TypeVar("T")

SortKey = Callable[[Any], Any]


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def from_string(cls, value: "str | SortOrder | None") -> "SortOrder":
        """'desc' / 'descending' (any case) map to DESC, everything else to ASC."""
        if isinstance(value, SortOrder):
            return value
        if isinstance(value, str) and value.strip().lower() in ("desc", "descending"):
            return cls.DESC
        return cls.ASC


class SortStrategy(Protocol):
    def sort(self, items: Sequence[T], field: str, order: SortOrder) -> list[T]: ...


def _id_key(item: Any) -> Any:
    return getattr(item, "id", None) or ""


def _created_at_key(item: Any) -> Any:
    return getattr(item, "created_at", None) or 0


DEFAULT_SORT_FIELDS: dict[str, SortKey] = {
    "id": _id_key,
    "createdat": _created_at_key,
    "created_at": _created_at_key,
}


class FieldSortStrategy:
    """
    Sorts by a closed set of field names, matched case-insensitively.

    Unknown fields are not an error: the items come back in their original order
    and a warning is logged. The ascending sort is stable and DESC is its exact
    reverse, so tied items keep a fixed order and positional cursors stay valid.

    Usage:
        strategy = FieldSortStrategy(extra_fields={"price": lambda p: p.price})
        strategy.sort(products, "PRICE", SortOrder.DESC)
    """

    def __init__(
        self,
        fields: Mapping[str, SortKey] | None = None,
        extra_fields: Mapping[str, SortKey] | None = None,
    ) -> None:
        table = dict(DEFAULT_SORT_FIELDS if fields is None else fields)
        table.update(extra_fields or {})
        self.fields = {name.lower(): key for name, key in table.items()}

    def supports(self, field: str) -> bool:
        return field.lower() in self.fields

    def sort(self, items: Sequence[T], field: str, order: SortOrder) -> list[T]:
        key = self.fields.get(field.lower())
        if key is None:
            logger.warning(
                "Unknown sort field, returning unsorted",
                extra={"sort_field": field, "known_fields": sorted(self.fields)},
            )
            return list(items)

        logger.debug(
            "Applying sort", extra={"sort_field": field, "sort_order": order.value}
        )
        ascending = sorted(items, key=key)
        if order is SortOrder.DESC:
            return ascending[::-1]
        return ascending


DEFAULT_SORT_STRATEGY = FieldSortStrategy()
