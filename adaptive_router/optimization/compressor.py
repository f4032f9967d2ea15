"""
Context compression.

Reduces a request's requirements, matched patterns and user context to
the essential information needed downstream.

Sandi Metz Principles:
- Single Responsibility: Lossy context compression
- Small methods: One extraction per method
- Degrade gracefully: Missing or malformed input yields empty shapes
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Deque, Dict, Iterable, Optional

from adaptive_router.config import config
from adaptive_router.models.plan import (
    GENERAL_PURPOSE_GOAL,
    CompressedContext,
    ContextSummary,
    EssentialRequirements,
)
from adaptive_router.models.statistics import CompressionStatistics
from adaptive_router.utils.logger import get_logger
from adaptive_router.utils.sizing import estimate_token_size

logger = get_logger(__name__)


@dataclass
class CompressionRecord:
    """One compression in the history."""

    original_size: int
    compressed_size: int
    compression_ratio: float
    timestamp: datetime = field(default_factory=datetime.utcnow)


class VibeContextCompressor:
    """
    Compresses request context for token efficiency.

    Keeps a bounded history of compressions for statistics.
    """

    def __init__(
        self,
        max_essential_explicit: Optional[int] = None,
        max_essential_implicit: Optional[int] = None,
        history_size: Optional[int] = None,
    ):
        """
        Initialize compressor.

        Args:
            max_essential_explicit: Explicit requirements kept (floor 1)
            max_essential_implicit: Implicit requirements kept (floor 1)
            history_size: Compression records kept
        """
        self._max_explicit = max(
            1,
            config.max_essential_explicit
            if max_essential_explicit is None
            else max_essential_explicit,
        )
        self._max_implicit = max(
            1,
            config.max_essential_implicit
            if max_essential_implicit is None
            else max_essential_implicit,
        )
        self._history: Deque[CompressionRecord] = deque(
            maxlen=history_size or config.compression_history_size
        )

    def extract_essential(self, requirements: Any) -> EssentialRequirements:
        """
        Keep only the leading explicit and implicit requirements.

        Args:
            requirements: Requirements-like object (None allowed)

        Returns:
            EssentialRequirements preserving original order
        """
        if requirements is None:
            return EssentialRequirements()

        explicit = list(getattr(requirements, "explicit", None) or [])
        implicit = list(getattr(requirements, "implicit", None) or [])
        return EssentialRequirements(
            explicit=explicit[: self._max_explicit],
            implicit=implicit[: self._max_implicit],
            domain=getattr(requirements, "domain", None),
            complexity=getattr(requirements, "complexity", None),
        )

    def extract_pattern_defaults(
        self, patterns: Optional[Iterable[Any]]
    ) -> Dict[str, Any]:
        """
        Merge requirement defaults of matched patterns.

        Later patterns win on key collision; entries without usable
        requirements are skipped.

        Args:
            patterns: Patterns or applicable patterns

        Returns:
            Merged defaults
        """
        defaults: Dict[str, Any] = {}
        if not patterns or isinstance(patterns, (str, bytes, dict)):
            return defaults

        for item in patterns:
            requirements = self._pattern_requirements(item)
            if requirements:
                defaults.update(requirements)
        return defaults

    def summarize_context(self, context: Any) -> ContextSummary:
        """
        Project a user context onto its summary.

        Args:
            context: User context or analysis (None allowed)

        Returns:
            ContextSummary with the first goal as primary goal
        """
        if context is None:
            return ContextSummary()

        goals = getattr(context, "goals", None) or []
        return ContextSummary(
            user_type=getattr(context, "user_type", None),
            technical_level=getattr(context, "technical_level", None),
            scale=getattr(context, "scale", None),
            budget=getattr(context, "budget", None),
            primary_goal=goals[0] if goals else GENERAL_PURPOSE_GOAL,
        )

    def compress_vibe_context(
        self, requirements: Any, patterns: Optional[Iterable[Any]], context: Any
    ) -> CompressedContext:
        """
        Compress requirements, patterns and context.

        Args:
            requirements: Full requirements
            patterns: Matched patterns
            context: User context or analysis

        Returns:
            CompressedContext with sizes and ratio
        """
        patterns = list(patterns or [])
        original_size = estimate_token_size(
            {"requirements": requirements, "patterns": patterns, "context": context}
        )

        essential = self.extract_essential(requirements)
        defaults = self.extract_pattern_defaults(patterns)
        summary = self.summarize_context(context)
        compressed_size = estimate_token_size(
            {
                "essential_requirements": essential,
                "pattern_defaults": defaults,
                "context_summary": summary,
            }
        )

        ratio = self._ratio(original_size, compressed_size)
        self._history.append(
            CompressionRecord(
                original_size=original_size,
                compressed_size=compressed_size,
                compression_ratio=ratio,
            )
        )
        logger.info(
            "Context compressed",
            original_size=original_size,
            compressed_size=compressed_size,
            reduction=round(ratio * 100, 1),
        )

        return CompressedContext(
            essential_requirements=essential,
            pattern_defaults=defaults,
            context_summary=summary,
            original_size=original_size,
            compressed_size=compressed_size,
            compression_ratio=ratio,
            token_savings=max(0, round(original_size * ratio)),
        )

    def get_average_compression_ratio(self) -> float:
        """Average ratio over the history, 0 when empty."""
        if not self._history:
            return 0.0
        return sum(r.compression_ratio for r in self._history) / len(self._history)

    def get_compression_stats(self) -> CompressionStatistics:
        """
        Get compression statistics.

        Returns:
            CompressionStatistics over the history
        """
        history = list(self._history)
        if not history:
            return CompressionStatistics()

        count = len(history)
        return CompressionStatistics(
            total_compressions=count,
            average_compression_ratio=round(self.get_average_compression_ratio(), 4),
            average_original_size=round(sum(r.original_size for r in history) / count),
            average_compressed_size=round(
                sum(r.compressed_size for r in history) / count
            ),
            total_tokens_saved=sum(
                max(0, r.original_size - r.compressed_size) for r in history
            ),
        )

    def clear_history(self) -> None:
        """Clear the compression history."""
        self._history.clear()
        logger.info("Compression history cleared")

    def set_compression_limits(
        self,
        max_essential_explicit: Optional[int] = None,
        max_essential_implicit: Optional[int] = None,
    ) -> Dict[str, int]:
        """
        Update compression limits, each floored at 1.

        Returns:
            Current limits
        """
        if max_essential_explicit is not None:
            self._max_explicit = max(1, max_essential_explicit)
        if max_essential_implicit is not None:
            self._max_implicit = max(1, max_essential_implicit)
        return self.compression_limits

    @property
    def compression_limits(self) -> Dict[str, int]:
        """Current compression limits."""
        return {
            "max_essential_explicit": self._max_explicit,
            "max_essential_implicit": self._max_implicit,
        }

    def _ratio(self, original_size: int, compressed_size: int) -> float:
        """Compression ratio in [0, 1], 0 when nothing to compress."""
        if original_size <= 0:
            return 0.0
        return min(1.0, max(0.0, 1 - compressed_size / original_size))

    def _pattern_requirements(self, item: Any) -> Optional[Dict[str, Any]]:
        """Requirement defaults of a pattern-like item, None if unusable."""
        if item is None:
            return None
        item = getattr(item, "pattern", item)
        if isinstance(item, dict):
            requirements = item.get("requirements")
        else:
            requirements = getattr(item, "requirements", None)
        if hasattr(requirements, "model_dump"):
            requirements = requirements.model_dump()
        if not isinstance(requirements, dict):
            return None
        return requirements
