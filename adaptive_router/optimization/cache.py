"""
Optimization plan cache.

In-process LRU + TTL cache of optimization plans keyed by the
discriminating fields of a request.

Sandi Metz Principles:
- Single Responsibility: Plan caching
- Small methods: Each operation isolated
- Encapsulated state: Counters only reachable through statistics
"""

import asyncio
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from adaptive_router.config import config
from adaptive_router.models.cache_entry import CacheEntry
from adaptive_router.models.plan import OptimizationPlan
from adaptive_router.models.statistics import CacheStatistics
from adaptive_router.utils.hasher import generate_optimization_key
from adaptive_router.utils.logger import get_logger, log_cache_hit, log_cache_miss
from adaptive_router.utils.sizing import estimate_serialized_size

logger = get_logger(__name__)

# Per-entry bookkeeping overhead in the memory estimate
ENTRY_OVERHEAD_BYTES = 64


class OptimizationCache:
    """
    LRU cache of optimization plans with TTL and savings gating.

    All mutations happen under one asyncio.Lock with no awaits inside
    critical sections, so eviction-then-insert is atomic.
    """

    def __init__(
        self,
        max_size: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        min_savings_threshold: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize cache.

        Args:
            max_size: Maximum entries (configured default if None)
            ttl_seconds: Entry lifetime (configured default if None)
            min_savings_threshold: Minimum savings % to cache
            clock: Time source returning epoch seconds
        """
        self._max_size = max(
            1, max_size if max_size is not None else config.cache_max_size
        )
        self._ttl = max(
            0.0, ttl_seconds if ttl_seconds is not None else config.cache_ttl_seconds
        )
        self._min_savings = max(
            0.0,
            min_savings_threshold
            if min_savings_threshold is not None
            else config.cache_min_savings_threshold,
        )
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = asyncio.Lock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expired = 0

    @staticmethod
    def generate_cache_key(requirements: Any, context: Any) -> str:
        """
        Generate the cache key for a request.

        Args:
            requirements: Full or essential requirements
            context: User context, analysis or context summary

        Returns:
            Cache key (opt:sha256hash)
        """
        return generate_optimization_key(requirements, context)

    def is_cacheable(self, plan: Optional[OptimizationPlan]) -> bool:
        """
        Check whether a plan meets the savings threshold.

        Args:
            plan: Optimization plan

        Returns:
            True if the plan has savings at or above the threshold
        """
        if plan is None or plan.token_savings is None:
            return False
        return plan.token_savings.percentage >= self._min_savings

    async def set(
        self, requirements: Any, context: Any, plan: OptimizationPlan
    ) -> bool:
        """
        Cache a plan.

        Args:
            requirements: Requirements used for the key
            context: Context used for the key
            plan: Plan to store

        Returns:
            False if the plan's savings are below the threshold
        """
        if not self.is_cacheable(plan):
            logger.debug(
                "Plan not cached, savings below threshold",
                savings=plan.savings_percentage if plan else None,
                threshold=self._min_savings,
            )
            return False

        key = self.generate_cache_key(requirements, context)
        now = self._clock()
        entry = CacheEntry(
            key=key,
            result=plan,
            timestamp=now,
            last_accessed=now,
            savings_percentage=plan.token_savings.percentage,
        )

        async with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._max_size:
                self._evict_lru()
            self._entries[key] = entry

        logger.info(
            "Cached optimization",
            key=key[:16],
            savings=plan.token_savings.percentage,
        )
        return True

    async def get(self, requirements: Any, context: Any) -> Optional[OptimizationPlan]:
        """
        Get a cached plan.

        Expired entries count as misses and are dropped.

        Args:
            requirements: Requirements used for the key
            context: Context used for the key

        Returns:
            Cached plan or None
        """
        key = self.generate_cache_key(requirements, context)
        async with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                self._misses += 1
            else:
                entry.touch(self._clock())
                self._entries.move_to_end(key)
                self._hits += 1

        if entry is None:
            log_cache_miss(key[:16])
            return None
        log_cache_hit(key[:16], savings=entry.savings_percentage)
        return entry.result

    async def has(self, requirements: Any, context: Any) -> bool:
        """
        Check for a live entry without touching recency or counters.

        Args:
            requirements: Requirements used for the key
            context: Context used for the key

        Returns:
            True if a non-expired entry exists
        """
        key = self.generate_cache_key(requirements, context)
        async with self._lock:
            return self._live_entry(key) is not None

    async def cleanup_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        async with self._lock:
            expired = [
                key
                for key, entry in self._entries.items()
                if entry.is_expired(now, self._ttl)
            ]
            for key in expired:
                del self._entries[key]
            self._expired += len(expired)

        if expired:
            logger.info("Removed expired cache entries", count=len(expired))
        return len(expired)

    async def clear(self) -> None:
        """Remove all entries and reset counters."""
        async with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            self._expired = 0
        logger.info("Optimization cache cleared")

    async def update_config(
        self,
        max_size: Optional[int] = None,
        min_savings_threshold: Optional[float] = None,
        ttl_seconds: Optional[float] = None,
    ) -> Dict[str, float]:
        """
        Update cache settings.

        Shrinking max_size evicts least recently used entries.

        Args:
            max_size: New capacity (floored at 1)
            min_savings_threshold: New savings threshold (floored at 0)
            ttl_seconds: New TTL (floored at 0)

        Returns:
            Current settings
        """
        async with self._lock:
            if max_size is not None:
                self._max_size = max(1, max_size)
                while len(self._entries) > self._max_size:
                    self._evict_lru()
            if min_savings_threshold is not None:
                self._min_savings = max(0.0, min_savings_threshold)
            if ttl_seconds is not None:
                self._ttl = max(0.0, ttl_seconds)

        logger.info("Cache config updated", **self.settings)
        return self.settings

    @property
    def settings(self) -> Dict[str, float]:
        """Current cache settings."""
        return {
            "max_size": self._max_size,
            "min_savings_threshold": self._min_savings,
            "ttl_seconds": self._ttl,
        }

    async def get_stats(self) -> CacheStatistics:
        """
        Get cache statistics.

        Returns:
            CacheStatistics snapshot
        """
        async with self._lock:
            return CacheStatistics.create(
                size=len(self._entries),
                max_size=self._max_size,
                hit_count=self._hits,
                miss_count=self._misses,
                eviction_count=self._evictions,
                expired_count=self._expired,
                memory_usage=self.estimate_memory_usage(),
            )

    def estimate_memory_usage(self) -> int:
        """
        Estimate memory held by cached entries.

        Returns:
            Approximate bytes (2 bytes per serialized character)
        """
        total = 0
        for key, entry in self._entries.items():
            total += len(key) * 2
            total += estimate_serialized_size(entry.result) * 2
            total += ENTRY_OVERHEAD_BYTES
        return total

    async def get_entries_by_criteria(
        self,
        min_savings: Optional[float] = None,
        max_age: Optional[float] = None,
        domain: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        List entry summaries matching criteria.

        Args:
            min_savings: Minimum savings percentage
            max_age: Maximum age in seconds
            domain: Domain of the cached plan's requirements

        Returns:
            Summaries sorted by savings, highest first
        """
        now = self._clock()
        async with self._lock:
            entries = list(self._entries.values())

        summaries = []
        for entry in entries:
            age = entry.age_seconds(now)
            if min_savings is not None and entry.savings_percentage < min_savings:
                continue
            if max_age is not None and age > max_age:
                continue
            if domain and entry.result.essential_requirements.domain != domain:
                continue
            summaries.append(
                {
                    "key": entry.key,
                    "timestamp": entry.timestamp,
                    "last_accessed": entry.last_accessed,
                    "savings_percentage": entry.savings_percentage,
                    "age": age,
                }
            )
        return sorted(summaries, key=lambda s: s["savings_percentage"], reverse=True)

    async def export_entries(self) -> List[Dict[str, Any]]:
        """
        Export entries for persistence.

        Returns:
            Records {key, result, timestamp, lastAccessed, savingsPercentage}
            in least-to-most recently used order
        """
        async with self._lock:
            entries = list(self._entries.values())
        return [entry.model_dump(mode="json", by_alias=True) for entry in entries]

    async def import_entries(self, records: Iterable[Dict[str, Any]]) -> int:
        """
        Import exported entries.

        Malformed and already expired records are skipped. The capacity
        still applies; older entries are evicted as needed.

        Args:
            records: Exported records

        Returns:
            Number of entries imported
        """
        now = self._clock()
        parsed = []
        for record in records or []:
            entry = self._parse_record(record)
            if entry is None or entry.is_expired(now, self._ttl):
                continue
            parsed.append(entry)

        async with self._lock:
            for entry in parsed:
                if entry.key in self._entries:
                    del self._entries[entry.key]
                elif len(self._entries) >= self._max_size:
                    self._evict_lru()
                self._entries[entry.key] = entry

        logger.info("Imported cache entries", count=len(parsed))
        return len(parsed)

    def _parse_record(self, record: Any) -> Optional[CacheEntry]:
        """Validate an exported record, None if malformed."""
        if not isinstance(record, dict):
            return None
        data = dict(record)
        data.setdefault("lastAccessed", data.get("timestamp"))
        try:
            return CacheEntry.model_validate(data)
        except PydanticValidationError as e:
            logger.warning("Skipping malformed cache record", error=str(e))
            return None

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the entry if present and fresh, dropping it if expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock(), self._ttl):
            del self._entries[key]
            return None
        return entry

    def _evict_lru(self) -> None:
        """Evict the least recently used entry."""
        key, _ = self._entries.popitem(last=False)
        self._evictions += 1
        logger.debug("Evicted cache entry", key=key[:16])
