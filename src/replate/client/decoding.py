"""Multi-strategy decoding of backend response envelopes.

The backend has wrapped its lists differently across versions and endpoints
(``{"ingredients": [...]}``, a bare ``[...]``, ``{"data": {...}}``) with no
version negotiation. Each strategy below is a pure function from the parsed
payload to a list of raw records, or None when the shape does not match;
strategies are tried in order until one matches.
"""

import json
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from replate.client.base import DecodingError
from replate.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Strategy = Callable[[Any, Sequence[str]], list[Any] | None]

_RECORD_KEYS = ("id", "_id", "name")


def _looks_like_record(value: Any) -> bool:
    return isinstance(value, dict) and any(key in value for key in _RECORD_KEYS)


def wrapped_list(payload: Any, entity_keys: Sequence[str]) -> list[Any] | None:
    """``{<entityKey>: [...]}``"""
    if not isinstance(payload, dict):
        return None
    for key in entity_keys:
        if isinstance(payload.get(key), list):
            return payload[key]
    return None


def bare_list(payload: Any, entity_keys: Sequence[str]) -> list[Any] | None:
    """``[...]``"""
    return payload if isinstance(payload, list) else None


def nested_list(payload: Any, entity_keys: Sequence[str]) -> list[Any] | None:
    """A list under ``data``, or under the entity key one object level down."""
    if not isinstance(payload, dict):
        return None

    data = payload.get("data")
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and (found := wrapped_list(data, entity_keys)) is not None:
        return found

    for value in payload.values():
        if isinstance(value, dict) and (found := wrapped_list(value, entity_keys)) is not None:
            return found
    return None


def single_object(payload: Any, entity_keys: Sequence[str]) -> list[Any] | None:
    """A lone record where a list was expected becomes a one-element list."""
    if not isinstance(payload, dict):
        return None

    for key in entity_keys:
        if _looks_like_record(payload.get(key)):
            return [payload[key]]
    if _looks_like_record(payload.get("data")):
        return [payload["data"]]
    if _looks_like_record(payload):
        return [payload]
    return None


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    wrapped_list,
    bare_list,
    nested_list,
    single_object,
)


def parse_json(raw: bytes | str) -> Any:
    """Parse a response body, raising DecodingError for empty or invalid JSON."""
    if not raw or not raw.strip():
        raise DecodingError("Empty response body")
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodingError("Response body is not valid JSON", response=str(e)) from e


def extract_records(
    payload: Any,
    entity_keys: Sequence[str],
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
) -> list[Any]:
    """Run the strategies in order and return the first matching record list."""
    for strategy in strategies:
        records = strategy(payload, entity_keys)
        if records is not None:
            logger.debug(f"Decoded {'/'.join(entity_keys)} via {strategy.__name__}")
            return records

    raise DecodingError(
        f"No known response shape for {'/'.join(entity_keys)}",
        response=type(payload).__name__,
    )


def decode_list(
    raw: bytes | str,
    entity_keys: Sequence[str],
    build: Callable[[dict[str, Any]], T | None],
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
) -> list[T]:
    """
    Decode a list response into canonical entities.

    Args:
        raw: Raw response body.
        entity_keys: Keys the list may be wrapped under, preferred first.
        build: Builds one entity from a raw record; returns None to drop it.
        strategies: Ordered shape strategies.

    Returns:
        Canonical entities; malformed records are dropped, not fatal.

    Raises:
        DecodingError: If the body is not JSON or matches no strategy.
    """
    records = extract_records(parse_json(raw), entity_keys, strategies)

    entities: list[T] = []
    dropped = 0
    for record in records:
        try:
            entity = build(record) if isinstance(record, dict) else None
        except (ValueError, TypeError, OverflowError) as e:
            logger.warning(f"Could not build {'/'.join(entity_keys)} record: {e}")
            entity = None
        if entity is None:
            dropped += 1
            continue
        entities.append(entity)

    if dropped:
        logger.warning(f"Dropped {dropped} malformed {'/'.join(entity_keys)} record(s)")
    return entities


def decode_object(
    raw: bytes | str,
    entity_keys: Sequence[str],
    build: Callable[[dict[str, Any]], T],
) -> T:
    """
    Decode a single-object response: bare, under an entity key, or under ``data``.

    Raises:
        DecodingError: If the body is not JSON or no object is found.
    """
    payload = parse_json(raw)
    if not isinstance(payload, dict):
        raise DecodingError(f"Expected an object for {'/'.join(entity_keys)}")

    for key in entity_keys:
        if isinstance(payload.get(key), dict):
            return build(payload[key])
    if isinstance(payload.get("data"), dict):
        return build(payload["data"])
    return build(payload)
