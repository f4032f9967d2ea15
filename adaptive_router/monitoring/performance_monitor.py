"""
Routing Performance Monitoring.

Tracks measured wall time of routing stages and whole route calls.

Sandi Metz Principles:
- Single Responsibility: Performance tracking
- Observable: Expose metrics
- Measured, not assumed: Every timing comes from the clock
"""

import asyncio
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from adaptive_router.utils.logger import get_logger

logger = get_logger(__name__)

# Stages slower than this are logged
SLOW_OPERATION_MS = 1000.0


@dataclass
class OperationMetrics:
    """Metrics for a single operation."""

    name: str
    start_time: float
    clock: Callable[[], float] = time.perf_counter
    end_time: Optional[float] = None
    success: bool = True
    error: Optional[str] = None

    @property
    def duration_ms(self) -> float:
        """Get duration in milliseconds."""
        end = self.end_time if self.end_time is not None else self.clock()
        return (end - self.start_time) * 1000

    def complete(self, success: bool = True, error: Optional[str] = None):
        """Mark operation as complete."""
        self.end_time = self.clock()
        self.success = success
        self.error = error


@dataclass
class RoutingMetrics:
    """Aggregated routing metrics."""

    total_routes: int = 0
    fallback_routes: int = 0
    failed_stages: int = 0
    cache_hits: int = 0
    cache_misses: int = 0

    # Timing stats (in ms)
    total_latency_ms: float = 0.0
    min_latency_ms: float = float("inf")
    max_latency_ms: float = 0.0

    # Per-stage timings
    operation_timings: Dict[str, List[float]] = field(
        default_factory=lambda: defaultdict(list)
    )

    @property
    def avg_latency_ms(self) -> float:
        """Get average route latency."""
        if self.total_routes == 0:
            return 0.0
        return self.total_latency_ms / self.total_routes

    @property
    def cache_hit_rate(self) -> float:
        """Get plan cache hit rate."""
        total = self.cache_hits + self.cache_misses
        if total == 0:
            return 0.0
        return self.cache_hits / total

    @property
    def fallback_rate(self) -> float:
        """Get share of routes that fell back."""
        if self.total_routes == 0:
            return 0.0
        return self.fallback_routes / self.total_routes

    def record_latency(self, latency_ms: float):
        """Record a route latency."""
        self.total_latency_ms += latency_ms
        self.min_latency_ms = min(self.min_latency_ms, latency_ms)
        self.max_latency_ms = max(self.max_latency_ms, latency_ms)

    def record_operation(self, name: str, duration_ms: float):
        """Record stage timing."""
        self.operation_timings[name].append(duration_ms)

    def get_operation_avg(self, name: str) -> float:
        """Get average duration for a stage."""
        timings = self.operation_timings.get(name, [])
        if not timings:
            return 0.0
        return sum(timings) / len(timings)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_routes": self.total_routes,
            "fallback_routes": self.fallback_routes,
            "fallback_rate": round(self.fallback_rate, 4),
            "failed_stages": self.failed_stages,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "cache_hit_rate": round(self.cache_hit_rate, 4),
            "avg_latency_ms": round(self.avg_latency_ms, 2),
            "min_latency_ms": round(self.min_latency_ms, 2)
            if self.min_latency_ms != float("inf")
            else 0,
            "max_latency_ms": round(self.max_latency_ms, 2),
            "operation_avgs": {
                name: round(self.get_operation_avg(name), 2)
                for name in self.operation_timings
            },
        }


class RoutingPerformanceMonitor:
    """
    Monitors routing performance.

    Collects and aggregates metrics.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        """
        Initialize monitor.

        Args:
            clock: Monotonic time source in seconds
        """
        self._clock = clock
        self._metrics = RoutingMetrics()
        self._lock = asyncio.Lock()

    @property
    def metrics(self) -> RoutingMetrics:
        """Get current metrics."""
        return self._metrics

    def start_operation(self, name: str) -> OperationMetrics:
        """
        Start tracking an operation.

        Args:
            name: Stage name (analyze, detect, optimize, score, decide)

        Returns:
            OperationMetrics for tracking
        """
        return OperationMetrics(name=name, start_time=self._clock(), clock=self._clock)

    async def end_operation(
        self, op: OperationMetrics, success: bool = True, error: Optional[str] = None
    ) -> float:
        """
        End tracking an operation.

        Args:
            op: Operation metrics
            success: Whether succeeded
            error: Error message if failed

        Returns:
            Measured duration in ms
        """
        op.complete(success=success, error=error)
        duration = op.duration_ms

        async with self._lock:
            self._metrics.record_operation(op.name, duration)
            if not success:
                self._metrics.failed_stages += 1

        if duration > SLOW_OPERATION_MS:
            logger.warning(
                "Slow operation detected",
                operation=op.name,
                duration_ms=duration,
            )
        return duration

    async def record_route(
        self, latency_ms: float, fallback: bool = False, cache_hit: bool = False
    ):
        """
        Record a completed route call.

        Args:
            latency_ms: Total latency in ms
            fallback: Whether the fallback handler was chosen
            cache_hit: Whether the plan came from cache
        """
        async with self._lock:
            self._metrics.total_routes += 1
            if fallback:
                self._metrics.fallback_routes += 1
            if cache_hit:
                self._metrics.cache_hits += 1
            else:
                self._metrics.cache_misses += 1
            self._metrics.record_latency(latency_ms)

    def reset(self):
        """Reset all metrics."""
        self._metrics = RoutingMetrics()

    def get_summary(self) -> Dict[str, Any]:
        """Get metrics summary."""
        return self._metrics.to_dict()
