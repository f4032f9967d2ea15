"""
Serialized size estimation.

Sandi Metz Principles:
- Single Responsibility: Estimate how large an object serializes
- Pure functions: No side effects
- Cycle safe: Visited-set guard instead of exception fallbacks
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Set

from pydantic import BaseModel

# Same approximation the token counter uses for non-tiktoken models
CHARS_PER_TOKEN = 4


def _scalar_size(value: Any) -> int:
    """Size of a JSON scalar."""
    if value is None:
        return 4
    if isinstance(value, bool):
        return 4 if value else 5
    if isinstance(value, Enum):
        return _scalar_size(value.value)
    if isinstance(value, (int, float)):
        return len(json.dumps(value))
    if isinstance(value, datetime):
        return len(value.isoformat()) + 2
    return len(json.dumps(str(value)))


def _walk(value: Any, active: Set[int]) -> Optional[int]:
    """
    Walk a value and sum its JSON-equivalent length.

    Args:
        value: Value to measure
        active: Ids of containers on the current path

    Returns:
        Character count, or None when a reference cycle was found
    """
    if isinstance(value, BaseModel):
        items = [(name, getattr(value, name)) for name in type(value).model_fields]
        return _walk_mapping(value, items, active)
    if isinstance(value, dict):
        return _walk_mapping(value, list(value.items()), active)
    if isinstance(value, (list, tuple, set, frozenset)):
        marker = id(value)
        if marker in active:
            return None
        active.add(marker)
        total = 2 + max(len(value) - 1, 0)
        for item in value:
            size = _walk(item, active)
            if size is None:
                return None
            total += size
        active.discard(marker)
        return total
    return _scalar_size(value)


def _walk_mapping(container: Any, items: list, active: Set[int]) -> Optional[int]:
    """Measure a dict-like container given its items."""
    marker = id(container)
    if marker in active:
        return None
    active.add(marker)
    total = 2 + max(len(items) - 1, 0)
    for key, item in items:
        size = _walk(item, active)
        if size is None:
            return None
        total += len(json.dumps(str(key))) + 1 + size
    active.discard(marker)
    return total


def estimate_serialized_size(value: Any) -> int:
    """
    Estimate the serialized (JSON) length of a value in characters.

    Args:
        value: Any JSON-like structure or pydantic model

    Returns:
        Character count, 0 for None or cyclic structures
    """
    if value is None:
        return 0
    size = _walk(value, set())
    return size or 0


def estimate_token_size(value: Any) -> int:
    """
    Estimate the size of a value in tokens.

    Args:
        value: Any JSON-like structure or pydantic model

    Returns:
        Approximate token count (characters / 4)
    """
    return round(estimate_serialized_size(value) / CHARS_PER_TOKEN)
