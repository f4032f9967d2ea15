"""
Pattern repositories.

Sandi Metz Principles:
- Single Responsibility: Pattern storage and lookup
- Open/Closed: New stores implement the repository interface
- Dependency Inversion: The library depends on the abstraction
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from adaptive_router.exceptions import ConfigurationError, ValidationError
from adaptive_router.models.pattern import Pattern
from adaptive_router.utils.logger import get_logger

logger = get_logger(__name__)


class PatternRepository(ABC):
    """
    Abstract store of domain patterns.

    Patterns are returned in registration order, which is the tie-break
    order used by domain detection.
    """

    @abstractmethod
    def list_patterns(self) -> List[Pattern]:
        """
        List all patterns in registration order.

        Returns:
            Patterns
        """
        pass

    @abstractmethod
    def get(self, pattern_id: str) -> Optional[Pattern]:
        """
        Get a pattern by id.

        Args:
            pattern_id: Pattern identifier

        Returns:
            Pattern or None if unknown
        """
        pass

    @property
    @abstractmethod
    def version(self) -> int:
        """Monotonic version, bumped on every change."""
        pass

    def default_pattern(self) -> Optional[Pattern]:
        """
        Get the designated default pattern.

        Returns:
            First pattern flagged as default, or None
        """
        for pattern in self.list_patterns():
            if pattern.is_default:
                return pattern
        return None


class InMemoryPatternRepository(PatternRepository):
    """Pattern repository backed by an ordered dict."""

    def __init__(self, patterns: Optional[Iterable[Pattern]] = None):
        """
        Initialize repository.

        Args:
            patterns: Initial patterns, registered in order

        Raises:
            ConfigurationError: If two patterns share an id
        """
        self._patterns: Dict[str, Pattern] = {}
        self._version = 0
        for pattern in patterns or []:
            self.register(pattern)

    def register(self, pattern: Pattern) -> None:
        """
        Register a pattern.

        Args:
            pattern: Pattern to register

        Raises:
            ConfigurationError: If a pattern with the same id is registered
        """
        if pattern.id in self._patterns:
            raise ConfigurationError(f"Pattern '{pattern.id}' is already registered")

        self._patterns[pattern.id] = pattern
        self._version += 1
        logger.debug("Registered pattern", pattern_id=pattern.id)

    def replace(self, pattern: Pattern) -> None:
        """
        Replace a registered pattern, keeping its position.

        Raises:
            ConfigurationError: If the pattern is not registered
        """
        if pattern.id not in self._patterns:
            raise ConfigurationError(f"Pattern '{pattern.id}' not registered")

        self._patterns[pattern.id] = pattern
        self._version += 1

    def unregister(self, pattern_id: str) -> None:
        """
        Remove a pattern.

        Args:
            pattern_id: Pattern identifier

        Raises:
            ConfigurationError: If the pattern is not registered
        """
        if pattern_id not in self._patterns:
            raise ConfigurationError(f"Pattern '{pattern_id}' not registered")

        del self._patterns[pattern_id]
        self._version += 1
        logger.debug("Unregistered pattern", pattern_id=pattern_id)

    def list_patterns(self) -> List[Pattern]:
        """List all patterns in registration order."""
        return list(self._patterns.values())

    def get(self, pattern_id: str) -> Optional[Pattern]:
        """Get a pattern by id."""
        return self._patterns.get(pattern_id)

    def has_pattern(self, pattern_id: str) -> bool:
        """Check if a pattern is registered."""
        return pattern_id in self._patterns

    @property
    def version(self) -> int:
        """Repository version."""
        return self._version


class JsonPatternRepository(PatternRepository):
    """
    Pattern repository loaded from a JSON file.

    Accepts either a list of pattern objects or an object of the form
    {"version": n, "patterns": [...]}.
    """

    def __init__(self, path: str | Path):
        """
        Initialize and load the repository.

        Args:
            path: JSON file path

        Raises:
            ConfigurationError: If the file cannot be read
            ValidationError: If a pattern definition is invalid
        """
        self._path = Path(path)
        self._store = InMemoryPatternRepository()
        self._declared_version: Optional[int] = None
        self._loads = 0
        self.reload()

    def reload(self) -> None:
        """
        Reload patterns from disk.

        The previous patterns stay in place if loading fails.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
            ValidationError: If a pattern definition is invalid
        """
        raw = self._read()
        declared, items = self._unwrap(raw)

        try:
            patterns = [Pattern.model_validate(item) for item in items]
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid pattern in {self._path}: {e}") from e

        self._store = InMemoryPatternRepository(patterns)
        self._declared_version = declared
        self._loads += 1
        logger.info("Loaded patterns", path=str(self._path), count=len(patterns))

    def list_patterns(self) -> List[Pattern]:
        """List all patterns in file order."""
        return self._store.list_patterns()

    def get(self, pattern_id: str) -> Optional[Pattern]:
        """Get a pattern by id."""
        return self._store.get(pattern_id)

    @property
    def version(self) -> int:
        """Declared file version, or the number of loads."""
        if self._declared_version is not None:
            return self._declared_version
        return self._loads

    def _read(self) -> object:
        """Read and parse the JSON file."""
        try:
            return json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(f"Cannot read patterns file {self._path}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {self._path}: {e}") from e

    def _unwrap(self, raw: object) -> tuple[Optional[int], list]:
        """Split the file payload into declared version and pattern items."""
        if isinstance(raw, list):
            return None, raw
        if isinstance(raw, dict) and isinstance(raw.get("patterns"), list):
            version = raw.get("version")
            return (version if isinstance(version, int) else None), raw["patterns"]
        raise ValidationError(
            f"Patterns file {self._path} must hold a list or an object with 'patterns'"
        )
