"""Timestamp normalization across the encodings the backend has emitted."""

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any

# Values at or above this magnitude are epoch milliseconds rather than seconds.
# 1e11 seconds is in the year 5138; 1e11 milliseconds is March 1973.
MILLISECONDS_THRESHOLD = 1e11

# Tried in order; %z accepts both "Z" and "+HH:MM".
STRING_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
)

_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")
_DATE_SPACE_TIME = re.compile(r"^(\d{4}-\d{2}-\d{2}) (\d{2}:)")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _from_string(text: str) -> datetime | None:
    text = text.strip()
    if not text:
        return None

    candidate = _LONG_FRACTION.sub(r"\1", text)
    candidate = _DATE_SPACE_TIME.sub(r"\1T\2", candidate)

    for fmt in STRING_FORMATS:
        try:
            parsed = datetime.strptime(candidate, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        try:
            return parsed.astimezone(timezone.utc)
        except OverflowError:
            return None

    # Epoch values sometimes arrive as numeric strings
    try:
        number = float(text)
    except ValueError:
        return None
    return _from_epoch(number)


def _from_epoch(value: float) -> datetime | None:
    if not math.isfinite(value):
        return None
    seconds = value / 1000 if abs(value) >= MILLISECONDS_THRESHOLD else value
    try:
        return _EPOCH + timedelta(seconds=seconds)
    except OverflowError:
        return None


def _finite_float(raw: Any) -> float | None:
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    return value if math.isfinite(value) else None


def _from_mapping(data: dict[str, Any]) -> datetime | None:
    for seconds_key, nanos_key in (("_seconds", "_nanoseconds"), ("seconds", "nanoseconds")):
        raw_seconds = data.get(seconds_key)
        if raw_seconds is None or isinstance(raw_seconds, bool):
            continue
        if not isinstance(raw_seconds, (int, float, str)):
            return None
        seconds = _finite_float(raw_seconds)
        if seconds is None:
            return None

        raw_nanos = data.get(nanos_key)
        nanos = 0.0
        if isinstance(raw_nanos, (int, float)) and not isinstance(raw_nanos, bool):
            nanos = _finite_float(raw_nanos)
            if nanos is None:
                return None
        try:
            return _EPOCH + timedelta(seconds=seconds, microseconds=nanos / 1000)
        except OverflowError:
            return None
    return None


def normalize_timestamp(raw: Any) -> datetime | None:
    """
    Convert any backend timestamp encoding to an aware UTC datetime.

    Accepts ISO-8601 strings (with or without fractional seconds and offset),
    plain ``yyyy-MM-dd`` dates, Unix epoch seconds or milliseconds (as numbers
    or numeric strings), and ``{"_seconds": N}`` timestamp objects.

    Returns None for anything unparseable; never raises.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, datetime):
        return raw.replace(tzinfo=timezone.utc) if raw.tzinfo is None else raw.astimezone(timezone.utc)
    if isinstance(raw, str):
        return _from_string(raw)
    if isinstance(raw, (int, float)):
        try:
            return _from_epoch(float(raw))
        except OverflowError:
            return None
    if isinstance(raw, dict):
        return _from_mapping(raw)
    return None


def format_timestamp(value: datetime | None) -> str | None:
    """Render a timestamp in the ISO-8601 UTC form the backend accepts."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
