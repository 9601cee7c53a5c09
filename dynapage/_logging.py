import hashlib
import logging
from typing import Any

# Library logger; applications attach their own handlers
logger = logging.getLogger("dynapage")
logger.addHandler(logging.NullHandler())


def _digest(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:8]


def redact_value(value: str | None) -> str:
    """
    Hashes a single sensitive value (item id, raw cursor string) for logging.
    Equal values give equal hashes, so log lines stay correlatable.
    """
    if value is None:
        return "<none>"
    return _digest(str(value))


def redact_key(key: dict[str, Any] | None) -> str:
    """
    Redacts a low-level DynamoDB key such as a LastEvaluatedKey.

    Attribute names and type tags are kept, values are hashed:
    {"id": {"S": "42"}} -> "{'id': 'S:73475cb4'}"
    """
    if key is None:
        return "<none>"
    try:
        redacted = {}
        for name, attribute in key.items():
            if isinstance(attribute, dict) and len(attribute) == 1:
                tag, raw = next(iter(attribute.items()))
                redacted[name] = f"{tag}:{_digest(str(raw))}"
            else:
                redacted[name] = _digest(str(attribute))
        return str(redacted)
    except Exception:
        return "<redaction_failed>"
