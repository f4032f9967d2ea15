"""
Keyword matching helpers.

Sandi Metz Principles:
- Single Responsibility: Term matching in normalized text
- Pure functions: No side effects
"""

import re
from functools import lru_cache
from typing import Iterable, List


def normalize_text(text: str | None) -> str:
    """
    Normalize free text for matching.

    Args:
        text: Raw text (None allowed)

    Returns:
        Lowercased text with collapsed whitespace
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip().lower()


@lru_cache(maxsize=4096)
def _term_pattern(term: str) -> re.Pattern:
    """Compile a word-boundary pattern for a term."""
    return re.compile(rf"(?<!\w){re.escape(term.lower())}(?!\w)")


def contains_term(text: str, term: str) -> bool:
    """
    Check whether a term occurs in text as a whole word or phrase.

    Args:
        text: Normalized text
        term: Word or phrase

    Returns:
        True if the term occurs on word boundaries
    """
    if not text or not term:
        return False
    return _term_pattern(term).search(text) is not None


def matching_terms(text: str, terms: Iterable[str]) -> List[str]:
    """
    List the terms found in text.

    Args:
        text: Normalized text
        terms: Candidate terms

    Returns:
        Terms that occur, in candidate order
    """
    return [term for term in terms if contains_term(text, term)]


def count_terms(text: str, terms: Iterable[str]) -> int:
    """Count how many terms occur in text."""
    return len(matching_terms(text, terms))


def any_term(text: str, terms: Iterable[str]) -> bool:
    """Check whether any term occurs in text."""
    return any(contains_term(text, term) for term in terms)


def unique_ordered(items: Iterable[str]) -> List[str]:
    """
    De-duplicate while preserving first occurrence order.

    Args:
        items: Items to de-duplicate

    Returns:
        Unique items in original order
    """
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
