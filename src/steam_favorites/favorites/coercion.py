"""Coercion of stored favorite ids into positive integers.

The persisted favorites field has been written by several client versions
and comes back in different shapes:

- an array of integers:         [440, 730]
- an array of numeric strings:  ["440", "730"]
- a mixed array:                [440, "730", None, "abc"]

Anything that is not a list is treated as "no favorites". Elements that
cannot be read as a positive base-10 integer are dropped silently.
"""

import re
from collections.abc import Iterable
from enum import Enum
from typing import Any

from steam_favorites.favorites.models import FavoriteId


_NUMERIC_RE = re.compile(r"^\+?[0-9]+$")

# App ids fit in 64 bits
MAX_APP_ID = 2**64 - 1
MAX_ID_DIGITS = len(str(MAX_APP_ID))


class WireShape(Enum):
    """Shapes the stored favorites field is known to take."""

    INT_ARRAY = "int_array"
    STRING_ARRAY = "string_array"
    MIXED_ARRAY = "mixed_array"
    UNSUPPORTED = "unsupported"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def classify(raw: Any) -> WireShape:
    """Tell which wire shape a raw favorites value has."""
    if not isinstance(raw, (list, tuple)):
        return WireShape.UNSUPPORTED
    if all(_is_int(v) for v in raw):
        return WireShape.INT_ARRAY
    if all(isinstance(v, str) for v in raw):
        return WireShape.STRING_ARRAY
    return WireShape.MIXED_ARRAY


def _from_int(value: int) -> FavoriteId | None:
    return value if 0 < value <= MAX_APP_ID else None


def _from_str(value: str) -> FavoriteId | None:
    text = value.strip()
    if not _NUMERIC_RE.match(text):
        return None
    digits = text.lstrip("+").lstrip("0")
    if len(digits) > MAX_ID_DIGITS:
        return None
    return _from_int(int(text))


def _from_any(value: Any) -> FavoriteId | None:
    if _is_int(value):
        return _from_int(value)
    if isinstance(value, str):
        return _from_str(value)
    # JSON round trips can turn 440 into 440.0
    if isinstance(value, float) and value.is_integer():
        return _from_int(int(value))
    return None


def coerce(raw: Any) -> list[FavoriteId]:
    """
    Normalize a raw favorites value into an ordered list of positive ids.

    Input order is preserved and duplicates are kept; the catalog filter
    downstream collapses them. Never raises.
    """
    shape = classify(raw)
    if shape is WireShape.UNSUPPORTED:
        return []
    if shape is WireShape.INT_ARRAY:
        parse = _from_int
    elif shape is WireShape.STRING_ARRAY:
        parse = _from_str
    elif shape is WireShape.MIXED_ARRAY:
        parse = _from_any
    else:  # pragma: no cover - WireShape is exhaustive
        raise AssertionError(f"Unhandled wire shape: {shape}")

    ids: list[FavoriteId] = []
    for value in raw:
        parsed = parse(value)
        if parsed is not None:
            ids.append(parsed)
    return ids


def unique_ids(ids: Iterable[FavoriteId]) -> list[FavoriteId]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[FavoriteId] = set()
    result = []
    for app_id in ids:
        if app_id not in seen:
            seen.add(app_id)
            result.append(app_id)
    return result
