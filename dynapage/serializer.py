from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import Binary, TypeDeserializer, TypeSerializer

from .exceptions import DynamoSerializationError


class DynamoSerializer:
    """
    Converts entity dumps to and from the DynamoDB low-level attribute format.

    Boto3's TypeSerializer rejects floats and its TypeDeserializer returns
    Decimal and Binary, so numbers are switched to Decimal on the way in and
    back to int/float on the way out; Binary comes back as bytes.
    Continuation keys never go through here: the cursor codec needs them in
    their tagged form ({"S": ...}, {"N": ...}, {"B": ...}).
    """

    def __init__(self) -> None:
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def to_dynamo(self, data: dict[str, Any]) -> dict[str, dict[str, Any]]:
        """{"price": 9.5} -> {"price": {"N": "9.5"}}"""
        item: dict[str, dict[str, Any]] = {}
        for name, value in data.items():
            try:
                item[name] = self._serializer.serialize(_to_decimals(value))
            except TypeError as e:
                raise DynamoSerializationError(
                    f"Failed to serialize field '{name}'. value={value!r} error={e!s}",
                    original_error=e,
                ) from e
        return item

    def to_dynamo_key(self, id_field: str, item_id: str) -> dict[str, dict[str, Any]]:
        """Primary key of an item: {"id": {"S": "..."}}."""
        return {id_field: {"S": item_id}}

    def from_dynamo(self, item: dict[str, Any]) -> dict[str, Any]:
        return {
            name: _from_decimals(self._deserializer.deserialize(value))
            for name, value in item.items()
        }


def _to_decimals(value: Any) -> Any:
    if isinstance(value, float):
        # str() first, so 19.99 stays 19.99 instead of its binary expansion
        return Decimal(str(value))
    if isinstance(value, list):
        return [_to_decimals(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_decimals(v) for k, v in value.items()}
    return value


def _from_decimals(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value % 1 == 0 else float(value)
    if isinstance(value, Binary):
        return value.value
    if isinstance(value, list):
        return [_from_decimals(v) for v in value]
    if isinstance(value, dict):
        return {k: _from_decimals(v) for k, v in value.items()}
    return value
