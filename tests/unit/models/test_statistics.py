"""Test statistics models."""

import pytest

from adaptive_router.models.statistics import (
    CacheStatistics,
    DecisionStatistics,
    OptimizationSummary,
)


class TestCacheStatistics:
    """Test cache statistics model."""

    def test_should_create_with_factory_method(self):
        """Test statistics creation with calculated hit ratio."""
        stats = CacheStatistics.create(
            size=5,
            max_size=10,
            hit_count=3,
            miss_count=1,
            eviction_count=2,
            expired_count=0,
            memory_usage=1024,
        )

        assert stats.total_requests == 4
        assert stats.hit_ratio == 75.0
        assert stats.utilization == 50.0

    def test_should_handle_no_requests(self):
        """Test zero lookups give zero hit ratio."""
        stats = CacheStatistics.create(
            size=0,
            max_size=10,
            hit_count=0,
            miss_count=0,
            eviction_count=0,
            expired_count=0,
            memory_usage=0,
        )
        assert stats.hit_ratio == 0.0

    def test_should_reject_inconsistent_totals(self):
        """Test total must equal hits plus misses."""
        with pytest.raises(ValueError, match="total_requests"):
            CacheStatistics(
                size=0,
                max_size=1,
                hit_count=1,
                miss_count=1,
                total_requests=5,
                hit_ratio=50.0,
                eviction_count=0,
                expired_count=0,
                memory_usage=0,
            )


class TestDecisionStatistics:
    """Test decision statistics model."""

    def test_should_report_most_selected_handler(self):
        """Test most selected handler."""
        stats = DecisionStatistics(
            total_decisions=3,
            recent_decisions=3,
            handler_distribution={"a": 1, "b": 2},
        )
        assert stats.most_selected == "b"

    def test_should_report_none_without_decisions(self):
        """Test empty distribution."""
        assert DecisionStatistics().most_selected is None


class TestOptimizationSummary:
    """Test optimization summary defaults."""

    def test_should_default_to_empty_summary(self):
        """Test defaults."""
        summary = OptimizationSummary()
        assert summary.total_optimizations == 0
        assert summary.best_savings_percentage is None
        assert summary.recent_trend == "stable"
