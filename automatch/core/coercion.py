"""
Lenient field coercion for registry rows.

Registry and intake rows are loosely typed: numbers arrive as strings,
booleans as "true"/"yes", lists as comma-separated text. These helpers
turn any value into the documented type or a default. They never raise.
"""

import math
from typing import Any, Optional


_TRUE_STRINGS = {"true", "t", "yes", "y", "1"}
_FALSE_STRINGS = {"false", "f", "no", "n", "0", ""}


def as_optional_bool(value: Any) -> Optional[bool]:
    """Coerce to bool, keeping None (and unrecognized text) as None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def as_bool(value: Any, default: bool = False) -> bool:
    result = as_optional_bool(value)
    return default if result is None else result


def as_float(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite float."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def as_optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    result = as_float(value, default=math.nan)
    return None if math.isnan(result) else result


def as_int(value: Any, default: int = 0) -> int:
    return int(as_float(value, default=float(default)))


def as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def as_str_list(value: Any) -> list[str]:
    """Coerce a list or comma-separated string to a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = [as_str(item) for item in value]
    else:
        return []
    return [item.strip() for item in items if item and item.strip()]


def as_int_set(value: Any) -> frozenset[int]:
    """Coerce a list of years (ints or numeric strings) to a frozenset."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = value.split(",")
    elif not isinstance(value, (list, tuple, set, frozenset)):
        value = [value]
    years = {as_int(item, default=0) for item in value}
    years.discard(0)
    return frozenset(years)


def as_mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}
