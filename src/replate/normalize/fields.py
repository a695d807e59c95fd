"""Field-name aliasing and lenient coercion helpers for raw backend records."""

import math
import re
from typing import Any

from replate.normalize.quantities import (
    DEFAULT_AMOUNT,
    normalize_unit,
    parse_amount,
    split_amount_and_unit,
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(name: str) -> str:
    """Convert a camelCase field name to snake_case."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def first_present(record: dict[str, Any], *names: str) -> Any:
    """
    Return the first non-null value among ``names``.

    Each camelCase name is also tried in its snake_case form, right after
    the camelCase one, so camelCase wins when a record carries both.
    """
    for name in names:
        for key in (name, snake_case(name)):
            value = record.get(key)
            if value is not None:
                return value
    return None


def coerce_identifier(raw: Any) -> str | None:
    """Normalize an identifier; Mongo ``{"$oid": ...}`` values are unwrapped."""
    if isinstance(raw, dict):
        raw = raw.get("$oid")
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return str(raw)
    if isinstance(raw, float):
        if not math.isfinite(raw):
            return None
        return str(int(raw)) if raw.is_integer() else str(raw)
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None


def record_identifier(record: dict[str, Any], *extra_names: str) -> str | None:
    """Read the record identifier from ``id``, ``_id`` or any extra alias."""
    for name in ("id", "_id", *extra_names):
        if (identifier := coerce_identifier(record.get(name))) is not None:
            return identifier
    return None


def coerce_str(raw: Any) -> str | None:
    """Return a stripped string, or None for empty and non-scalar values."""
    if raw is None or isinstance(raw, (dict, list)):
        return None
    text = str(raw).strip()
    return text or None


def coerce_bool(raw: Any, default: bool = False) -> bool:
    """Interpret booleans sent as bools, numbers or strings."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in ("true", "yes", "1", "y"):
            return True
        if lowered in ("false", "no", "0", "n"):
            return False
    return default


def coerce_float(raw: Any) -> float | None:
    """Return a finite float, or None when the value is not numeric."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    return value if math.isfinite(value) else None


def coerce_int(raw: Any, default: int) -> int:
    """Return a positive integer parsed leniently, or ``default``."""
    value = parse_amount(raw, default=0.0)
    return int(round(value)) if value >= 1 else default


def coerce_str_list(raw: Any) -> list[str]:
    """Normalize a list of strings; a single string becomes a one-item list."""
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw.strip()] if raw.strip() else []
    if not isinstance(raw, list):
        return []
    return [text for item in raw if (text := coerce_str(item)) is not None]


def extract_quantity(record: dict[str, Any]) -> tuple[float, str]:
    """
    Read an amount and unit from either quantity layout.

    Accepts a nested ``{"quantity": {"amount": .., "unit": ..}}`` object or
    flat ``quantity``/``amount`` plus ``unit`` fields. When the unit is
    missing and the amount is text such as ``"50g"``, the unit is split off.
    Defaults to 1.0 ``pieces``.
    """
    nested = record.get("quantity")
    if isinstance(nested, dict):
        raw_amount = first_present(nested, "amount", "value", "quantity")
        raw_unit = first_present(nested, "unit")
    else:
        raw_amount = nested if nested is not None else record.get("amount")
        raw_unit = first_present(record, "unit")

    if raw_amount is None:
        return DEFAULT_AMOUNT, normalize_unit(raw_unit)

    if (raw_unit is None or raw_unit == "") and isinstance(raw_amount, str):
        amount_text, unit_text = split_amount_and_unit(raw_amount)
        if amount_text:
            return parse_amount(amount_text), normalize_unit(unit_text)

    return parse_amount(raw_amount), normalize_unit(raw_unit)
