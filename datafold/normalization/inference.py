"""Stateless value predicates used for column type inference."""
from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Any, Iterable

NUMERIC = "numeric"
BOOLEAN = "boolean"
DATETIME = "datetime"
STRING = "string"
UNKNOWN = "unknown"

_BOOLEAN_STRINGS = {"true", "false"}


def is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, str):
        text = value.strip()
        # float() also accepts "1_000", "inf" and "nan".
        if not text or "_" in text:
            return False
        try:
            number = float(text)
        except ValueError:
            return False
        return math.isfinite(number)
    return False


def is_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    return isinstance(value, str) and value.strip().lower() in _BOOLEAN_STRINGS


def is_datetime(value: Any) -> bool:
    if isinstance(value, (datetime, date, time)):
        return True
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def infer_type(values: Iterable[Any]) -> str:
    """Classify a column from its values; empty values are ignored."""

    present = [value for value in values if not is_missing(value)]
    if not present:
        return UNKNOWN
    if all(is_numeric(value) for value in present):
        return NUMERIC
    if all(is_boolean(value) for value in present):
        return BOOLEAN
    if all(is_datetime(value) for value in present):
        return DATETIME
    return STRING
