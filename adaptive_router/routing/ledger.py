"""
Handler performance ledger.

Sandi Metz Principles:
- Single Responsibility: Accumulate handler outcomes
- Encapsulated state: Accumulators only reachable through snapshots
"""

import asyncio
from typing import Dict, Optional

from adaptive_router.config import config
from adaptive_router.models.routing import HandlerPerformance, PerformanceHistory
from adaptive_router.utils.logger import get_logger

logger = get_logger(__name__)


class PerformanceLedger:
    """
    Per-handler success and cost accumulators.

    Performance is only ever learned from recorded outcomes.
    """

    def __init__(
        self,
        performance_bonus: Optional[float] = None,
        multiplier_cap: Optional[float] = None,
    ):
        """
        Initialize ledger.

        Args:
            performance_bonus: Added to the success rate in the multiplier
            multiplier_cap: Upper bound of the multiplier
        """
        self._bonus = (
            config.performance_bonus if performance_bonus is None else performance_bonus
        )
        self._cap = (
            config.performance_multiplier_cap
            if multiplier_cap is None
            else multiplier_cap
        )
        self._records: Dict[str, HandlerPerformance] = {}
        self._lock = asyncio.Lock()

    async def record(
        self, handler_id: str, success: bool, cost: Optional[float] = None
    ) -> HandlerPerformance:
        """
        Record an outcome.

        Args:
            handler_id: Handler that did the work
            success: Whether it succeeded
            cost: Tokens consumed, if reported

        Returns:
            Updated performance snapshot
        """
        async with self._lock:
            current = self._records.get(handler_id) or HandlerPerformance(
                handler_id=handler_id
            )
            total = current.total_requests + 1
            successful = current.successful_requests + (1 if success else 0)
            total_cost = current.total_cost + (cost or 0)
            updated = HandlerPerformance(
                handler_id=handler_id,
                total_requests=total,
                successful_requests=successful,
                success_rate=successful / total,
                total_cost=total_cost,
                average_cost=total_cost / total,
            )
            self._records[handler_id] = updated

        logger.debug(
            "Handler outcome recorded",
            handler_id=handler_id,
            success=success,
            success_rate=round(updated.success_rate, 3),
        )
        return updated

    async def get(self, handler_id: str) -> Optional[HandlerPerformance]:
        """Get a handler's performance, None without history."""
        async with self._lock:
            return self._records.get(handler_id)

    async def history(self, handler_id: str) -> PerformanceHistory:
        """Get the scoring view of a handler's performance."""
        record = await self.get(handler_id)
        if record is None:
            return PerformanceHistory()
        return record.to_history()

    async def multiplier(self, handler_id: str) -> Optional[float]:
        """
        Score multiplier from history.

        Returns:
            min(success_rate + bonus, cap), None without history
        """
        record = await self.get(handler_id)
        if record is None or record.total_requests == 0:
            return None
        return min(record.success_rate + self._bonus, self._cap)

    async def snapshot(self) -> Dict[str, HandlerPerformance]:
        """Copy of every handler's performance."""
        async with self._lock:
            return dict(self._records)

    async def reset(self) -> None:
        """Forget all outcomes."""
        async with self._lock:
            self._records.clear()
        logger.info("Performance ledger reset")
