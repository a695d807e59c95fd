"""Normalize loosely-typed backend values into canonical Python values."""

from replate.normalize.fields import (
    coerce_identifier,
    extract_quantity,
    first_present,
    record_identifier,
)
from replate.normalize.quantities import (
    DEFAULT_AMOUNT,
    DEFAULT_UNIT,
    parse_amount,
    parse_minutes,
    split_amount_and_unit,
)
from replate.normalize.timestamps import format_timestamp, normalize_timestamp

__all__ = [
    "DEFAULT_AMOUNT",
    "DEFAULT_UNIT",
    "coerce_identifier",
    "extract_quantity",
    "first_present",
    "format_timestamp",
    "normalize_timestamp",
    "parse_amount",
    "parse_minutes",
    "record_identifier",
    "split_amount_and_unit",
]
