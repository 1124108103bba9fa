"""Deep equality and value formatting helpers."""

import json
import math
from collections.abc import Mapping, MutableSequence
from typing import Any


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, MutableSequence))


def same(a: Any, b: Any) -> bool:
    """Deep structural equality.

    ``NaN`` equals ``NaN``, mappings compare key by key, sequences element by
    element, and booleans never equal numbers.

    >>> same({"a": [1, float("nan")]}, {"a": [1, float("nan")]})
    True
    >>> same(True, 1)
    False
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    if isinstance(a, Mapping):
        if not isinstance(b, Mapping) or len(a) != len(b):
            return False
        return all(key in b and same(a[key], b[key]) for key in a)
    if _is_sequence(a):
        if not _is_sequence(b) or len(a) != len(b):
            return False
        return all(same(x, y) for x, y in zip(a, b))
    if isinstance(b, Mapping) or _is_sequence(b):
        return False
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        return False


def smart(value: Any) -> str:
    """Format a value for an error message: strings quoted, everything else
    as JSON where possible."""
    if isinstance(value, str):
        return f'"{value}"'
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return repr(value)
