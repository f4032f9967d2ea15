"""
Domain patterns.

Contains the pattern repository interface and implementations, the
built-in catalog and the pattern library used for domain detection.
"""

from adaptive_router.patterns.catalog import GENERAL_PATTERN_ID, default_patterns
from adaptive_router.patterns.library import (
    DomainPatternLibrary,
    Expander,
    confidence_label,
)
from adaptive_router.patterns.repository import (
    InMemoryPatternRepository,
    JsonPatternRepository,
    PatternRepository,
)

__all__ = [
    # Catalog
    "GENERAL_PATTERN_ID",
    "default_patterns",
    # Library
    "DomainPatternLibrary",
    "Expander",
    "confidence_label",
    # Repository
    "PatternRepository",
    "InMemoryPatternRepository",
    "JsonPatternRepository",
]
