"""Amount and quantity parsing for loosely-typed backend values."""

import math
import re
from typing import Any

DEFAULT_AMOUNT = 1.0
DEFAULT_UNIT = "pieces"

_MIXED_FRACTION = re.compile(r"^(\d+)\s+(\d+)\s*/\s*(\d+)$")
_RANGE = re.compile(r"^(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)$")
_AMOUNT_AND_UNIT = re.compile(r"^(\d+(?:\.\d+)?(?:\s*/\s*\d+)?(?:\s+\d+/\d+)?)\s*(.*)$")


def _finite_non_negative(value: float) -> float | None:
    if math.isfinite(value) and value >= 0:
        return value
    return None


def _to_float(text: str) -> float | None:
    try:
        return _finite_non_negative(float(text))
    except (ValueError, OverflowError):
        return None


def _parse_fraction(text: str) -> float | None:
    parts = text.split("/")
    if len(parts) != 2:
        return None
    numerator = _to_float(parts[0].strip())
    denominator = _to_float(parts[1].strip())
    if numerator is None or not denominator:
        return None
    return numerator / denominator


def parse_amount(raw: Any, default: float = DEFAULT_AMOUNT) -> float:
    """
    Parse a numeric amount out of a number or a display string.

    Handles formats like:
    - 2, 2.5 (numbers are passed through)
    - "2", "2.5"
    - "1/2"
    - "1 1/2" (mixed fraction)
    - "2-3" (range, returns average)
    - "50g", "about 3" (everything but digits and '.' is stripped)

    Never raises; returns ``default`` when nothing numeric is found.
    """
    if isinstance(raw, bool) or raw is None:
        return default

    if isinstance(raw, (int, float)):
        try:
            value = _finite_non_negative(float(raw))
        except OverflowError:
            value = None
        return default if value is None else value

    if not isinstance(raw, str):
        return default

    text = raw.strip()
    if not text:
        return default

    if (value := _to_float(text)) is not None:
        return value

    if (value := _parse_fraction(text)) is not None:
        return value

    if mixed := _MIXED_FRACTION.match(text):
        whole, num, denom = (int(g) for g in mixed.groups())
        if denom:
            return whole + num / denom

    if span := _RANGE.match(text):
        low, high = float(span.group(1)), float(span.group(2))
        return (low + high) / 2

    stripped = re.sub(r"[^0-9.]", "", text)
    if stripped and (value := _to_float(stripped)) is not None:
        return value

    return default


def parse_minutes(raw: Any) -> int:
    """Parse a duration in minutes; absent values are 0."""
    if raw is None or raw == "":
        return 0
    return int(round(parse_amount(raw, default=0.0)))


def split_amount_and_unit(text: str) -> tuple[str, str]:
    """
    Split a combined measure string into amount and unit text.

    Examples:
        "2 cups" -> ("2", "cups")
        "500g" -> ("500", "g")
        "1/2 tsp" -> ("1/2", "tsp")
        "pinch" -> ("", "pinch")
    """
    text = (text or "").strip()
    match = _AMOUNT_AND_UNIT.match(text)
    if match:
        return match.group(1).strip(), match.group(2).strip()
    return "", text


def normalize_unit(raw: Any) -> str:
    """Return a non-empty unit string."""
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return DEFAULT_UNIT
