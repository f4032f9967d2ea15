"""
Cache entry models.

Sandi Metz Principles:
- Single Responsibility: Cache data structure
- Clear naming: Descriptive fields
- Stable persistence shape: Aliases match the export format
"""

from pydantic import BaseModel, ConfigDict, Field

from adaptive_router.models.plan import OptimizationPlan


class CacheEntry(BaseModel):
    """Cache entry storing an optimization plan."""

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(..., min_length=1, description="Cache key")
    result: OptimizationPlan = Field(..., description="Cached optimization plan")
    timestamp: float = Field(..., gt=0, description="Creation time (epoch seconds)")
    last_accessed: float = Field(
        ..., alias="lastAccessed", description="Last access time (epoch seconds)"
    )
    savings_percentage: float = Field(
        default=0.0, alias="savingsPercentage", description="Plan savings %"
    )

    def age_seconds(self, now: float) -> float:
        """Calculate entry age in seconds."""
        return now - self.timestamp

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        """Check whether the entry outlived its TTL."""
        return self.age_seconds(now) > ttl_seconds

    def touch(self, now: float) -> None:
        """Record an access."""
        self.last_accessed = now
