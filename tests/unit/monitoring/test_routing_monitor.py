"""Unit tests for the routing performance monitor."""

import pytest

from adaptive_router.monitoring.performance_monitor import (
    OperationMetrics,
    RoutingMetrics,
    RoutingPerformanceMonitor,
)


class TestOperationMetrics:
    """Tests for OperationMetrics."""

    def test_duration_in_progress(self, clock):
        """Test duration calculation while in progress."""
        op = OperationMetrics(name="analyze", start_time=clock(), clock=clock)
        clock.advance(0.1)
        assert op.duration_ms == pytest.approx(100, abs=0.01)

    def test_complete(self, clock):
        """Test completing an operation."""
        op = OperationMetrics(name="optimize", start_time=clock(), clock=clock)
        clock.advance(0.5)
        op.complete(success=False, error="cache unavailable")
        clock.advance(1)

        assert op.success is False
        assert op.error == "cache unavailable"
        assert op.duration_ms == pytest.approx(500, abs=0.01)


class TestRoutingMetrics:
    """Tests for RoutingMetrics."""

    def test_empty_rates(self):
        """Test rates with no routes."""
        metrics = RoutingMetrics()
        assert metrics.avg_latency_ms == 0.0
        assert metrics.cache_hit_rate == 0.0
        assert metrics.fallback_rate == 0.0
        assert metrics.to_dict()["min_latency_ms"] == 0

    def test_latency_bounds(self):
        """Test min and max latency."""
        metrics = RoutingMetrics(total_routes=2)
        metrics.record_latency(10)
        metrics.record_latency(30)

        assert metrics.avg_latency_ms == 20
        assert metrics.min_latency_ms == 10
        assert metrics.max_latency_ms == 30

    def test_operation_average(self):
        """Test per-stage averages."""
        metrics = RoutingMetrics()
        metrics.record_operation("score", 2)
        metrics.record_operation("score", 4)

        assert metrics.get_operation_avg("score") == 3
        assert metrics.get_operation_avg("decide") == 0.0


class TestRoutingPerformanceMonitor:
    """Tests for RoutingPerformanceMonitor."""

    @pytest.mark.asyncio
    async def test_measures_stage_duration(self, clock):
        """Test stage timing comes from the clock."""
        monitor = RoutingPerformanceMonitor(clock=clock)

        op = monitor.start_operation("detect")
        clock.advance(0.02)
        duration = await monitor.end_operation(op)

        assert duration == pytest.approx(20, abs=0.01)
        assert monitor.get_summary()["operation_avgs"]["detect"] == 20.0

    @pytest.mark.asyncio
    async def test_counts_failed_stages(self, clock):
        """Test failed stage counter."""
        monitor = RoutingPerformanceMonitor(clock=clock)

        op = monitor.start_operation("optimize")
        await monitor.end_operation(op, success=False, error="boom")

        assert monitor.metrics.failed_stages == 1

    @pytest.mark.asyncio
    async def test_records_routes(self):
        """Test route counters."""
        monitor = RoutingPerformanceMonitor()

        await monitor.record_route(12.0, fallback=True)
        await monitor.record_route(8.0, cache_hit=True)

        summary = monitor.get_summary()
        assert summary["total_routes"] == 2
        assert summary["fallback_rate"] == 0.5
        assert summary["cache_hit_rate"] == 0.5
        assert summary["avg_latency_ms"] == 10.0

    @pytest.mark.asyncio
    async def test_reset(self):
        """Test reset clears metrics."""
        monitor = RoutingPerformanceMonitor()
        await monitor.record_route(5.0)

        monitor.reset()

        assert monitor.get_summary()["total_routes"] == 0
