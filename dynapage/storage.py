"""
Storage facade over the DynamoDB low-level client.

The pagination and filter engines only talk to the store through the
``StorageFacade`` protocol; ``DynamoTable`` is its boto3 implementation.
"""

import functools
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar, cast

from ._logging import logger, redact_key, redact_value
from .entity import DynamoEntity
from .exceptions import handle_dynamo_errors
from .serializer import DynamoSerializer

T = TypeVar("T", bound=DynamoEntity)
F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class ScanPage(Generic[T]):
    """
    One page of a limited scan.

    Attributes:
        items: Entities returned by the store for this page
        last_evaluated_key: The store's continuation key in low-level format,
            or None when the scan is exhausted
    """

    items: list[T]
    last_evaluated_key: dict[str, dict[str, Any]] | None = None


class StorageFacade(Protocol[T]):
    """The store primitives the engines consume."""

    table_name: str

    def put_item(self, entity: T) -> None: ...

    def get_item(self, item_id: str) -> T | None: ...

    def delete_item(self, item_id: str) -> None: ...

    def scan_all(self) -> list[T]: ...

    def scan_limited(
        self, limit: int, start_key: dict[str, dict[str, Any]] | None = None
    ) -> ScanPage[T]: ...

    def approximate_item_count(self) -> int: ...


def storage_operation(operation: str) -> Callable[[F], F]:
    """
    Wraps a DynamoTable method so that botocore errors are translated into
    DynapageError subclasses, and every failure is logged with the table and
    operation before being re-raised unchanged.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self: "DynamoTable[Any]", *args: Any, **kwargs: Any) -> Any:
            try:
                with handle_dynamo_errors(table_name=self.table_name):
                    return func(self, *args, **kwargs)
            except Exception:
                logger.error(
                    "Storage operation failed",
                    extra={"table": self.table_name, "operation": operation},
                    exc_info=True,
                )
                raise

        return cast(F, wrapper)

    return decorator


class DynamoTable(Generic[T]):
    """
    StorageFacade backed by a boto3 DynamoDB client.

    Usage:
        table = DynamoTable("orders", Order, boto3.client("dynamodb"))
        page = table.scan_limited(10)
        more = table.scan_limited(10, start_key=page.last_evaluated_key)
    """

    def __init__(
        self,
        table_name: str,
        entity_cls: type[T],
        client: Any,
        serializer: DynamoSerializer | None = None,
        id_field: str = "id",
    ) -> None:
        self.table_name = table_name
        self.entity_cls = entity_cls
        self.client = client
        self.serializer = serializer or DynamoSerializer()
        self.id_field = id_field

    def _to_entity(self, item: dict[str, Any]) -> T:
        # Deserialize DynamoDB JSON -> Python Dict -> Pydantic Model
        return self.entity_cls.model_validate(self.serializer.from_dynamo(item))

    @storage_operation("put")
    def put_item(self, entity: T) -> None:
        data = entity.model_dump(mode="python", exclude_none=True)
        item = self.serializer.to_dynamo(data)

        logger.info(
            "Saving item",
            extra={
                "table": self.table_name,
                "operation": "put",
                "pk_hash": redact_value(entity.id),
            },
        )
        self.client.put_item(TableName=self.table_name, Item=item)

    @storage_operation("get")
    def get_item(self, item_id: str) -> T | None:
        logger.debug(
            "Fetching item",
            extra={"table": self.table_name, "operation": "get", "pk_hash": redact_value(item_id)},
        )
        response = self.client.get_item(
            TableName=self.table_name,
            Key=self.serializer.to_dynamo_key(self.id_field, item_id),
        )
        if "Item" not in response:
            return None
        return self._to_entity(response["Item"])

    @storage_operation("delete")
    def delete_item(self, item_id: str) -> None:
        logger.info(
            "Deleting item",
            extra={
                "table": self.table_name,
                "operation": "delete",
                "pk_hash": redact_value(item_id),
            },
        )
        self.client.delete_item(
            TableName=self.table_name,
            Key=self.serializer.to_dynamo_key(self.id_field, item_id),
        )

    @storage_operation("scan_all")
    def scan_all(self) -> list[T]:
        """
        Scans the whole table, following LastEvaluatedKey until exhausted.
        WARNING: Can consume high memory and read capacity for large tables.
        """
        logger.info("Starting full scan", extra={"table": self.table_name, "operation": "scan_all"})

        items: list[T] = []
        paginator = self.client.get_paginator("scan")
        for page in paginator.paginate(TableName=self.table_name):
            items.extend(self._to_entity(item) for item in page.get("Items", []))

        logger.debug(
            "Full scan finished",
            extra={"table": self.table_name, "operation": "scan_all", "count": len(items)},
        )
        return items

    @storage_operation("scan_limited")
    def scan_limited(
        self, limit: int, start_key: dict[str, dict[str, Any]] | None = None
    ) -> ScanPage[T]:
        """
        Executes a single scan call (NOT the paginator) reading at most `limit`
        items, resuming after `start_key` when given.
        """
        kwargs: dict[str, Any] = {"TableName": self.table_name, "Limit": limit}
        if start_key:
            kwargs["ExclusiveStartKey"] = start_key

        logger.info(
            "Scanning page",
            extra={
                "table": self.table_name,
                "operation": "scan_limited",
                "limit": limit,
                "start_key": redact_key(start_key),
            },
        )
        response = self.client.scan(**kwargs)

        items = [self._to_entity(item) for item in response.get("Items", [])]
        # An empty LastEvaluatedKey means the same as no key at all
        last_key = response.get("LastEvaluatedKey") or None
        return ScanPage(items=items, last_evaluated_key=last_key)

    @storage_operation("count")
    def approximate_item_count(self) -> int:
        """
        Returns DescribeTable's ItemCount. DynamoDB refreshes it roughly every
        six hours, so it is an estimate, never a committed count.
        """
        response = self.client.describe_table(TableName=self.table_name)
        count = int(response["Table"].get("ItemCount", 0))
        logger.debug(
            "Approximate item count",
            extra={"table": self.table_name, "operation": "count", "count": count},
        )
        return count
