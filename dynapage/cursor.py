"""
Opaque pagination cursors.

A cursor is URL-safe base64 (no padding) over a small JSON document whose
``_type`` tag says which continuation mechanism produced it:

- ``native``: the store's own continuation key (DynamoDB LastEvaluatedKey),
  with every attribute value tagged by its primitive kind (S, N or B).
  Binary values are base64 encoded inside the document.
- ``positional``: the id of the next item of an in-memory sorted sequence.

Decoding never raises. A malformed cursor decodes to None and callers treat
it as "start from the first page".
"""

import base64
import binascii
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Literal, Protocol, TypeVar, Union

from boto3.dynamodb.types import Binary
from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter, field_validator
from pydantic_core import from_json

from ._logging import logger, redact_value
from .exceptions import DynamoSerializationError

T = TypeVar("T")

NATIVE = "native"
POSITIONAL = "positional"

ScalarTag = Literal["S", "N", "B"]


def _check_number(name: str, raw: str) -> None:
    try:
        number = Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"attribute '{name}' is not a number") from None
    if not number.is_finite():
        raise ValueError(f"attribute '{name}' is not a finite number")


class NativeCursor(BaseModel):
    """Wraps a DynamoDB continuation key for the unsorted scan path."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: Literal["native"] = Field(default=NATIVE, alias="_type")
    key: dict[str, dict[ScalarTag, str]]

    @field_validator("key")
    @classmethod
    def _one_typed_value_per_attribute(
        cls, key: dict[str, dict[str, str]]
    ) -> dict[str, dict[str, str]]:
        for name, value in key.items():
            if len(value) != 1:
                raise ValueError(f"attribute '{name}' must carry exactly one typed value")
            if "B" in value:
                base64.b64decode(value["B"], validate=True)
            if "N" in value:
                _check_number(name, value["N"])
        return key

    @classmethod
    def from_native_key(cls, native_key: dict[str, dict[str, Any]]) -> "NativeCursor":
        """
        Builds the cursor payload from a low-level key.

        Input:  {"pk": {"S": "a"}, "sk": {"N": "10"}, "blob": {"B": b"\\x00"}}
        """
        key: dict[str, dict[str, str]] = {}
        for name, attribute in native_key.items():
            if "S" in attribute:
                key[name] = {"S": str(attribute["S"])}
            elif "N" in attribute:
                key[name] = {"N": str(attribute["N"])}
            elif "B" in attribute:
                encoded = base64.b64encode(_as_bytes(attribute["B"])).decode("ascii")
                key[name] = {"B": encoded}
            else:
                raise DynamoSerializationError(
                    f"Unsupported key attribute type for '{name}': {sorted(attribute)}"
                )
        return cls(key=key)

    def to_native_key(self) -> dict[str, dict[str, Any]]:
        """Restores the low-level key, ready to be sent as ExclusiveStartKey."""
        restored: dict[str, dict[str, Any]] = {}
        for name, value in self.key.items():
            tag, raw = next(iter(value.items()))
            restored[name] = {tag: base64.b64decode(raw) if tag == "B" else raw}
        return restored


class PositionalCursor(BaseModel):
    """Wraps the id of the item a sorted, in-memory page starts from."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: Literal["positional"] = Field(default=POSITIONAL, alias="_type")
    id: str


def _cursor_tag(value: Any) -> str | None:
    if isinstance(value, dict):
        return value.get("_type")
    return getattr(value, "type", None)


CursorPayload = Annotated[
    Union[
        Annotated[NativeCursor, Tag(NATIVE)],
        Annotated[PositionalCursor, Tag(POSITIONAL)],
    ],
    Discriminator(_cursor_tag),
]

_payload_adapter: TypeAdapter[NativeCursor | PositionalCursor] = TypeAdapter(CursorPayload)


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, Binary):
        return bytes(value.value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise DynamoSerializationError(f"Binary key value expected, got {type(value).__name__}")


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(cursor: str) -> bytes:
    padded = cursor + "=" * (-len(cursor) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


class CursorCodec:
    """
    Encodes and decodes the opaque cursor string.

    Usage:
        codec = CursorCodec()
        cursor = codec.encode_native({"id": {"S": "42"}})
        codec.is_native(cursor)        # True
        codec.decode(cursor)           # NativeCursor(key={"id": {"S": "42"}})
        codec.decode("garbage")        # None
    """

    def encode_native(self, native_key: dict[str, dict[str, Any]]) -> str:
        payload = NativeCursor.from_native_key(native_key)
        return self._encode(payload)

    def encode_positional(self, item_id: str) -> str:
        return self._encode(PositionalCursor(id=item_id))

    def decode(self, cursor: str | None) -> NativeCursor | PositionalCursor | None:
        """Returns the decoded payload, or None when the cursor is unparseable."""
        if not cursor:
            return None
        try:
            return _payload_adapter.validate_json(_b64decode(cursor))
        except (ValueError, binascii.Error):
            # pydantic's ValidationError and UnicodeError are ValueErrors too
            logger.debug("Unparseable cursor", extra={"cursor_hash": redact_value(cursor)})
            return None

    def is_native(self, cursor: str | None) -> bool:
        """Checks the type tag only, without validating the payload."""
        if not cursor:
            return False
        try:
            root = from_json(_b64decode(cursor))
        except (ValueError, binascii.Error):
            return False
        return isinstance(root, dict) and root.get("_type") == NATIVE

    def _encode(self, payload: BaseModel) -> str:
        return _b64encode(payload.model_dump_json(by_alias=True).encode("utf-8"))


class CursorStrategy(Protocol[T]):
    """
    Resumes and produces positional cursors over an in-memory sequence.
    Repositories may supply their own, e.g. to key cursors on another field.
    """

    def resolve_offset(self, cursor: str, items: Sequence[T]) -> int: ...

    def encode(self, item: T) -> str | None: ...


class IdCursorStrategy:
    """
    Default cursor strategy: the cursor holds the id of the first item of the
    requested page and resolves to that item's index by linear search.

    A cursor that is not positional (native or unparseable), or whose item no
    longer exists, resolves to offset 0 and the page restarts from the top.
    """

    def __init__(self, codec: CursorCodec | None = None) -> None:
        self.codec = codec or CursorCodec()

    def resolve_offset(self, cursor: str, items: Sequence[Any]) -> int:
        decoded = self.codec.decode(cursor)
        if not isinstance(decoded, PositionalCursor):
            logger.warning(
                "Cursor is not positional, restarting from the first item",
                extra={"cursor_hash": redact_value(cursor)},
            )
            return 0

        for index, item in enumerate(items):
            if getattr(item, "id", None) == decoded.id:
                return index

        logger.warning(
            "Cursor item not found, restarting from the first item",
            extra={"cursor_hash": redact_value(cursor)},
        )
        return 0

    def encode(self, item: Any) -> str | None:
        item_id = getattr(item, "id", None)
        if not item_id:
            return None
        return self.codec.encode_positional(item_id)
