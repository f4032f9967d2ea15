"""
Cache key generation utilities.

Sandi Metz Principles:
- Single Responsibility: Hash generation
- Small functions: Each does one thing
- Pure functions: No side effects
"""

import hashlib
import json
from enum import Enum
from typing import Any, Dict, List

DEFAULT_DOMAIN = "unknown"
DEFAULT_COMPLEXITY = "medium"
DEFAULT_USER_TYPE = "general"
DEFAULT_TECHNICAL_LEVEL = "beginner"
DEFAULT_SCALE = "medium"


def _scalar(value: Any, default: str) -> str:
    """Render an optional scalar (or enum) as a key component."""
    if value is None or value == "":
        return default
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _items(value: Any) -> List[str]:
    """Render an optional list as a list of strings."""
    if not value:
        return []
    return [str(item) for item in value]


def requirement_fingerprint(requirements: Any) -> Dict[str, Any]:
    """
    Extract the discriminating requirement fields.

    Works with full and essential requirement shapes (anything exposing
    explicit, implicit, domain and complexity).

    Args:
        requirements: Requirements-like object or None

    Returns:
        Dict of discriminating fields
    """
    return {
        "explicit": _items(getattr(requirements, "explicit", None)),
        "implicit": _items(getattr(requirements, "implicit", None)),
        "domain": _scalar(getattr(requirements, "domain", None), DEFAULT_DOMAIN),
        "complexity": _scalar(
            getattr(requirements, "complexity", None), DEFAULT_COMPLEXITY
        ),
    }


def context_fingerprint(context: Any) -> Dict[str, str]:
    """
    Extract the discriminating user context fields.

    Args:
        context: UserContext-like or ContextSummary-like object or None

    Returns:
        Dict with user type, technical level and scale
    """
    return {
        "user_type": _scalar(getattr(context, "user_type", None), DEFAULT_USER_TYPE),
        "technical_level": _scalar(
            getattr(context, "technical_level", None), DEFAULT_TECHNICAL_LEVEL
        ),
        "scale": _scalar(getattr(context, "scale", None), DEFAULT_SCALE),
    }


def hash_object(obj: Dict[str, Any]) -> str:
    """
    Hash a JSON-compatible dict deterministically.

    Args:
        obj: Dict to hash

    Returns:
        Hex sha256 digest of the canonical JSON form
    """
    canonical = json.dumps(obj, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()


def generate_optimization_key(requirements: Any, context: Any) -> str:
    """
    Generate cache key for an optimization plan.

    Args:
        requirements: Requirements-like object
        context: User context-like object

    Returns:
        Cache key (opt:sha256hash)
    """
    payload = {
        "requirements": requirement_fingerprint(requirements),
        "context": context_fingerprint(context),
    }
    return f"opt:{hash_object(payload)}"
