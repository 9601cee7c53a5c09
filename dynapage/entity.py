"""
Base entity for paginated DynamoDB tables.

Every record stored through dynapage carries a string ``id`` (the partition key)
and optional creation/update timestamps in epoch milliseconds.
"""

import operator
import time
from collections.abc import Callable
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ValidationError

E = TypeVar("E", bound="DynamoEntity")

Accessor = Callable[[Any], Any]


def now_millis() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class DynamoEntity(BaseModel):
    """
    The Base Class entities inherit from.

    Property lookups by name (used by the filter layer) go through an accessor
    table built once per class, so an unknown property name is a plain mapping
    miss instead of a runtime type inspection.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    created_at: int | None = Field(default=None, alias="createdAt")
    updated_at: int | None = Field(default=None, alias="updatedAt")

    _accessors: ClassVar[dict[str, Accessor]] = {}

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        cls._accessors = cls._build_accessors()

    @classmethod
    def _build_accessors(cls) -> dict[str, Accessor]:
        table: dict[str, Accessor] = {}
        for field_name, field_info in cls.model_fields.items():
            getter = operator.attrgetter(field_name)
            table[field_name] = getter
            if field_info.alias:
                table[field_info.alias] = getter
        table.update(cls.extra_accessors())
        return table

    @classmethod
    def extra_accessors(cls) -> dict[str, Accessor]:
        """
        Hook for subclasses to expose computed properties to property lookups.

        Usage:
            class Order(DynamoEntity):
                lines: list[Line]

                @classmethod
                def extra_accessors(cls):
                    return {"line_count": lambda order: len(order.lines)}
        """
        return {}

    @classmethod
    def accessor_for(cls, name: str) -> Accessor | None:
        """Returns the accessor registered for a property name, or None."""
        return cls._accessors.get(name)


DynamoEntity._accessors = DynamoEntity._build_accessors()


def validate_entity(entity: E) -> E:
    """Raises ValidationError if the entity has a blank id."""
    if not entity.id or not entity.id.strip():
        raise ValidationError("Entity ID cannot be null or blank", field="id", value=entity.id)
    return entity


def with_timestamps(entity: E, now: int | None = None) -> E:
    """
    Returns a copy of the entity with timestamps applied: created_at is kept
    when already set, updated_at is always refreshed.
    """
    stamp = now if now is not None else now_millis()
    return entity.model_copy(
        update={
            "created_at": entity.created_at if entity.created_at is not None else stamp,
            "updated_at": stamp,
        }
    )
