"""
Custom exceptions for the routing engine.
"""


class RouterError(Exception):
    """Base exception for routing engine errors."""

    pass


class ConfigurationError(RouterError):
    """Raised when configuration or registry usage is invalid."""

    pass


class ValidationError(RouterError):
    """Raised when persisted or external data fails validation."""

    pass


class CacheError(RouterError):
    """Raised when cache operations fail."""

    pass


class PatternExpansionError(RouterError):
    """Raised by a pattern expander that cannot produce requirements."""

    pass

