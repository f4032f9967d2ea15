"""
Handler availability.

Sandi Metz Principles:
- Single Responsibility: Track in-flight work per handler
- Open/Closed: Availability sources plug in through the interface
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Optional

from adaptive_router.utils.logger import get_logger

logger = get_logger(__name__)


class HandlerAvailability(ABC):
    """Interface for handler availability sources."""

    @abstractmethod
    async def is_available(self, handler_id: str) -> bool:
        """
        Check whether a handler can take more work.

        Args:
            handler_id: Handler identifier

        Returns:
            True if the handler is below its limit
        """
        pass

    @abstractmethod
    async def acquire(self, handler_id: str) -> None:
        """Mark one unit of work as routed to the handler."""
        pass

    @abstractmethod
    async def release(self, handler_id: str) -> None:
        """Mark one unit of the handler's work as finished."""
        pass


class WorkloadTracker(HandlerAvailability):
    """
    Counts in-flight routed work against per-handler limits.

    Handlers without a limit are always available.
    """

    def __init__(self, limits: Optional[Dict[str, int]] = None):
        """
        Initialize tracker.

        Args:
            limits: Handler id to max concurrent work
        """
        self._limits: Dict[str, int] = dict(limits or {})
        self._in_flight: Dict[str, int] = {}
        self._lock = asyncio.Lock()

    def set_limit(self, handler_id: str, max_concurrent: Optional[int]) -> None:
        """
        Set or remove a handler's limit.

        Args:
            handler_id: Handler identifier
            max_concurrent: Limit, None for unbounded
        """
        if max_concurrent is None:
            self._limits.pop(handler_id, None)
        else:
            self._limits[handler_id] = max(1, max_concurrent)

    async def is_available(self, handler_id: str) -> bool:
        limit = self._limits.get(handler_id)
        if limit is None:
            return True
        async with self._lock:
            return self._in_flight.get(handler_id, 0) < limit

    async def acquire(self, handler_id: str) -> None:
        async with self._lock:
            self._in_flight[handler_id] = self._in_flight.get(handler_id, 0) + 1

    async def release(self, handler_id: str) -> None:
        async with self._lock:
            current = self._in_flight.get(handler_id, 0)
            if current <= 0:
                logger.warning("Release without routed work", handler_id=handler_id)
                return
            self._in_flight[handler_id] = current - 1

    async def in_flight(self, handler_id: str) -> int:
        """Current in-flight work of a handler."""
        async with self._lock:
            return self._in_flight.get(handler_id, 0)

    async def snapshot(self) -> Dict[str, Dict[str, Optional[int]]]:
        """In-flight work and limit per known handler."""
        async with self._lock:
            handlers = set(self._limits) | set(self._in_flight)
            return {
                handler_id: {
                    "in_flight": self._in_flight.get(handler_id, 0),
                    "limit": self._limits.get(handler_id),
                }
                for handler_id in sorted(handlers)
            }
