"""
Response envelope decoding.

Every successful answer looks like
``{"Response": [{"<Key>": {...}}, ...], "Pagination": {...}}``; each item is a
single-key object whose key names the payload type. Anchor objects may carry
a variant suffix (``MonetaryAccountBank`` when asking for ``MonetaryAccount``),
so lookups fall back to prefix matching.
"""

from typing import Any, Optional

from pydantic import ValidationError

from bunq_client.errors import DecodeError
from bunq_client.models.pagination import Pagination


def response_items(payload: Any) -> list[dict[str, Any]]:
    if not isinstance(payload, dict) or not isinstance(payload.get("Response"), list):
        raise DecodeError("Missing 'Response' array in envelope")
    return [item for item in payload["Response"] if isinstance(item, dict)]


def _match(item: dict[str, Any], key: str) -> Optional[Any]:
    if key in item:
        return item[key]
    for name, value in item.items():
        if name.startswith(key):
            return value
    return None


def unwrap(item: dict[str, Any]) -> Any:
    """Return the payload of a single-key item regardless of its type key."""
    if len(item) != 1:
        raise DecodeError(f"Expected a single-key item, got keys {sorted(item)}")
    return next(iter(item.values()))


def extract(payload: Any, key: str) -> dict[str, Any]:
    """First object stored under ``key`` (or a key starting with it)."""
    items = response_items(payload)
    if not items:
        raise DecodeError("Empty 'Response' array")
    for item in items:
        value = _match(item, key)
        if value is not None:
            return value
    raise DecodeError(f"Key {key!r} not found in response")


def extract_list(payload: Any, key: Optional[str] = None) -> list[dict[str, Any]]:
    """All objects of a list response, in response order.

    Items that do not carry ``key`` are skipped. Without a key every item is
    unwrapped as is.
    """
    result = []
    for item in response_items(payload):
        if key is None:
            result.append(unwrap(item))
            continue
        value = _match(item, key)
        if value is not None:
            result.append(value)
    return result


def extract_id(payload: Any) -> int:
    value = extract(payload, "Id")
    try:
        return int(value["id"])
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"Malformed Id object: {value!r}") from e


def extract_uuid(payload: Any) -> str:
    value = extract(payload, "Uuid")
    try:
        return str(value["uuid"])
    except (KeyError, TypeError) as e:
        raise DecodeError(f"Malformed Uuid object: {value!r}") from e


def extract_pagination(payload: Any) -> Optional[Pagination]:
    raw = payload.get("Pagination") if isinstance(payload, dict) else None
    if raw is None:
        return None
    try:
        return Pagination.model_validate(raw)
    except ValidationError as e:
        raise DecodeError(f"Malformed Pagination object: {e}") from e
