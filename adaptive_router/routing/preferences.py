"""
User handler preferences.

Sandi Metz Principles:
- Single Responsibility: Learn per-user handler weights
- Open/Closed: Storage plugs in through the interface
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Optional

from adaptive_router.config import config
from adaptive_router.utils.logger import get_logger

logger = get_logger(__name__)

NEUTRAL_WEIGHT = 1.0
# Satisfaction 0..1 maps onto weights 0.5..1.5
SATISFACTION_OFFSET = 0.5


class PreferenceStore(ABC):
    """Interface for user preference storage."""

    @abstractmethod
    async def get_preferences(self, user_id: str) -> Dict[str, float]:
        """
        Get a user's handler weights.

        Args:
            user_id: User identifier

        Returns:
            Handler id to weight (1.0 is neutral)
        """
        pass

    @abstractmethod
    async def update(self, user_id: str, handler_id: str, satisfaction: float) -> float:
        """
        Move a weight toward the observed satisfaction.

        Args:
            user_id: User identifier
            handler_id: Handler that served the user
            satisfaction: Satisfaction 0-1

        Returns:
            Updated weight
        """
        pass


class InMemoryPreferenceStore(PreferenceStore):
    """Process-local preference store using an exponential moving average."""

    def __init__(self, learning_rate: Optional[float] = None):
        """
        Initialize store.

        Args:
            learning_rate: EMA rate (configured default if None)
        """
        self._rate = (
            config.preference_learning_rate if learning_rate is None else learning_rate
        )
        self._weights: Dict[str, Dict[str, float]] = {}
        self._lock = asyncio.Lock()

    async def get_preferences(self, user_id: str) -> Dict[str, float]:
        async with self._lock:
            return dict(self._weights.get(user_id, {}))

    async def update(self, user_id: str, handler_id: str, satisfaction: float) -> float:
        target = SATISFACTION_OFFSET + max(0.0, min(1.0, satisfaction))
        async with self._lock:
            weights = self._weights.setdefault(user_id, {})
            current = weights.get(handler_id, NEUTRAL_WEIGHT)
            updated = current + self._rate * (target - current)
            weights[handler_id] = updated

        logger.debug(
            "Preference updated",
            user_id=user_id,
            handler_id=handler_id,
            weight=round(updated, 4),
        )
        return updated
