"""
Statistics models.

Sandi Metz Principles:
- Small classes with clear purpose
- Computed properties for derived metrics
- Clear naming conventions
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator


class CacheStatistics(BaseModel):
    """Optimization cache statistics."""

    size: int = Field(..., ge=0, description="Entries currently stored")
    max_size: int = Field(..., ge=1, description="Capacity")
    hit_count: int = Field(..., ge=0, description="Cache hits")
    miss_count: int = Field(..., ge=0, description="Cache misses")
    total_requests: int = Field(..., ge=0, description="Lookups")
    hit_ratio: float = Field(..., ge=0.0, le=100.0, description="Hit ratio %")
    eviction_count: int = Field(..., ge=0, description="LRU evictions")
    expired_count: int = Field(..., ge=0, description="Entries removed by cleanup")
    memory_usage: int = Field(..., ge=0, description="Estimated bytes")

    @model_validator(mode="after")
    def validate_statistics_consistency(self) -> "CacheStatistics":
        """Validate total equals hits + misses."""
        if self.total_requests != self.hit_count + self.miss_count:
            raise ValueError(
                f"total_requests ({self.total_requests}) must equal hit_count "
                f"({self.hit_count}) + miss_count ({self.miss_count})"
            )
        return self

    @classmethod
    def create(
        cls,
        size: int,
        max_size: int,
        hit_count: int,
        miss_count: int,
        eviction_count: int,
        expired_count: int,
        memory_usage: int,
    ) -> "CacheStatistics":
        """
        Create cache statistics with calculated hit ratio.

        Args:
            size: Entries stored
            max_size: Capacity
            hit_count: Cache hits
            miss_count: Cache misses
            eviction_count: LRU evictions
            expired_count: Expired removals
            memory_usage: Estimated bytes

        Returns:
            CacheStatistics instance
        """
        total = hit_count + miss_count
        hit_ratio = (hit_count / total * 100.0) if total > 0 else 0.0
        return cls(
            size=size,
            max_size=max_size,
            hit_count=hit_count,
            miss_count=miss_count,
            total_requests=total,
            hit_ratio=round(hit_ratio, 2),
            eviction_count=eviction_count,
            expired_count=expired_count,
            memory_usage=memory_usage,
        )

    @property
    def utilization(self) -> float:
        """Percentage of capacity in use."""
        return round(self.size / self.max_size * 100.0, 2)


class CompressionStatistics(BaseModel):
    """Aggregate compression statistics."""

    total_compressions: int = Field(default=0, ge=0)
    average_compression_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    average_original_size: float = Field(default=0.0, ge=0.0)
    average_compressed_size: float = Field(default=0.0, ge=0.0)
    total_tokens_saved: int = Field(default=0, ge=0)


class DecisionStatistics(BaseModel):
    """Aggregate routing decision statistics."""

    total_decisions: int = Field(default=0, ge=0)
    recent_decisions: int = Field(default=0, ge=0, description="Window size used")
    fallback_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    average_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    handler_distribution: Dict[str, int] = Field(default_factory=dict)
    criteria_usage: Dict[str, int] = Field(default_factory=dict)

    @property
    def most_selected(self) -> Optional[str]:
        """Handler selected most often in the window."""
        if not self.handler_distribution:
            return None
        return max(self.handler_distribution, key=self.handler_distribution.get)


class OptimizationSummary(BaseModel):
    """Aggregate optimization statistics."""

    total_optimizations: int = Field(default=0, ge=0)
    total_tokens_saved: int = Field(default=0)
    average_savings_percentage: float = Field(default=0.0)
    best_savings_percentage: Optional[float] = None
    worst_savings_percentage: Optional[float] = None
    recent_trend: str = Field(
        default="stable", description="improving, declining or stable"
    )
    by_optimization_type: Dict[str, int] = Field(default_factory=dict)
