"""
Small helpers shared by services and the document repository.
"""
import math
from typing import Any


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (2.5 -> 3, 0.5 -> 1)."""
    return int(math.floor(value + 0.5))


def strip_absent(value: Any) -> Any:
    """
    Remove absent values from a JSON-like structure before it is written.

    Keys (and list items) whose value is None are dropped recursively.
    A dict or list that becomes empty only because of that stripping is
    dropped as well, while one that was empty to begin with is kept so a
    cleared collection can still be persisted.

    Example:
        {"a": None, "b": {"c": None}, "d": []} -> {"d": []}
    """
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if item is None:
                continue
            cleaned = strip_absent(item)
            if _emptied_by_stripping(item, cleaned):
                continue
            result[key] = cleaned
        return result

    if isinstance(value, (list, tuple)):
        result = []
        for item in value:
            if item is None:
                continue
            cleaned = strip_absent(item)
            if _emptied_by_stripping(item, cleaned):
                continue
            result.append(cleaned)
        return result

    return value


def _emptied_by_stripping(original: Any, cleaned: Any) -> bool:
    return isinstance(original, (dict, list, tuple)) and len(original) > 0 and len(cleaned) == 0
