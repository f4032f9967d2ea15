"""
Optimization statistics tracking.

Sandi Metz Principles:
- Single Responsibility: Aggregate optimization outcomes
- Small methods: Each statistic computed separately
- Bounded memory: History capped
"""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional

from adaptive_router.models.plan import TokenSavings
from adaptive_router.models.statistics import OptimizationSummary
from adaptive_router.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_HISTORY_SIZE = 1000
# Percentage points between half-window averages that count as a trend
TREND_MARGIN = 5.0


@dataclass
class OptimizationRecord:
    """One recorded optimization."""

    baseline: int
    optimized: int
    saved: int
    percentage: float
    types: List[str] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)


class OptimizationStatsTracker:
    """
    Tracks optimization savings over time.

    Keeps running totals plus a bounded history for trends and breakdowns.
    """

    def __init__(
        self,
        history_size: int = DEFAULT_HISTORY_SIZE,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize tracker.

        Args:
            history_size: Records kept for trends
            clock: Time source returning epoch seconds
        """
        self._clock = clock
        self._history: Deque[OptimizationRecord] = deque(maxlen=history_size)
        self._reset_totals()

    def record(
        self, savings: TokenSavings, optimization_types: Optional[List[str]] = None
    ) -> None:
        """
        Record an optimization outcome.

        Args:
            savings: Token savings of the plan
            optimization_types: Types of optimizations applied
        """
        entry = OptimizationRecord(
            baseline=savings.baseline,
            optimized=savings.optimized,
            saved=savings.saved,
            percentage=savings.percentage,
            types=list(optimization_types or []),
            timestamp=self._clock(),
        )
        self._history.append(entry)

        self._total += 1
        self._tokens_saved += savings.saved
        self._average += (savings.percentage - self._average) / self._total
        if self._best is None or savings.percentage > self._best:
            self._best = savings.percentage
        if self._worst is None or savings.percentage < self._worst:
            self._worst = savings.percentage

    def get_summary(self) -> OptimizationSummary:
        """
        Get aggregate statistics.

        Returns:
            OptimizationSummary
        """
        return OptimizationSummary(
            total_optimizations=self._total,
            total_tokens_saved=self._tokens_saved,
            average_savings_percentage=round(self._average, 2),
            best_savings_percentage=self._best,
            worst_savings_percentage=self._worst,
            recent_trend=self.get_trends()["trend"],
            by_optimization_type={
                kind: data["count"] for kind, data in self.get_breakdown().items()
            },
        )

    def get_trends(self, hours: float = 24) -> Dict[str, Any]:
        """
        Compare the first and second half of a recent window.

        Args:
            hours: Window length

        Returns:
            Dict with period, count, average_savings and trend
        """
        cutoff = self._clock() - hours * 3600
        recent = [r for r in self._history if r.timestamp >= cutoff]
        if not recent:
            return {
                "period": f"{hours}h",
                "count": 0,
                "average_savings": 0.0,
                "trend": "no-data",
            }

        midpoint = len(recent) // 2
        first, second = recent[:midpoint], recent[midpoint:]
        trend = "stable"
        if first and second:
            delta = self._mean(second) - self._mean(first)
            if delta > TREND_MARGIN:
                trend = "improving"
            elif delta < -TREND_MARGIN:
                trend = "declining"

        return {
            "period": f"{hours}h",
            "count": len(recent),
            "average_savings": round(self._mean(recent), 2),
            "trend": trend,
        }

    def get_breakdown(self) -> Dict[str, Dict[str, float]]:
        """
        Break down recorded savings by optimization type.

        Returns:
            Type to {count, total_saved, average_saved}
        """
        breakdown: Dict[str, Dict[str, float]] = {}
        for entry in self._history:
            for kind in entry.types or ["general"]:
                data = breakdown.setdefault(kind, {"count": 0, "total_saved": 0})
                data["count"] += 1
                data["total_saved"] += entry.saved
        for data in breakdown.values():
            data["average_saved"] = round(data["total_saved"] / data["count"], 2)
        return breakdown

    def reset(self, keep_history: bool = False) -> None:
        """
        Reset statistics.

        Args:
            keep_history: Keep the record history
        """
        self._reset_totals()
        if not keep_history:
            self._history.clear()
        logger.info("Optimization statistics reset", keep_history=keep_history)

    def _reset_totals(self) -> None:
        """Zero running totals."""
        self._total = 0
        self._tokens_saved = 0
        self._average = 0.0
        self._best: Optional[float] = None
        self._worst: Optional[float] = None

    @staticmethod
    def _mean(records: List[OptimizationRecord]) -> float:
        """Mean savings percentage."""
        return sum(r.percentage for r in records) / len(records)
