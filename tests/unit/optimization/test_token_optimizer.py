"""Test token optimizer orchestration."""

import pytest

from adaptive_router.exceptions import CacheError
from adaptive_router.models.pattern import ApplicablePattern
from adaptive_router.models.plan import CompressedContext
from adaptive_router.models.requirements import Requirements
from adaptive_router.optimization.cache import OptimizationCache
from adaptive_router.optimization.optimizer import (
    CONTEXT_COMPRESSION,
    FALLBACK,
    PATTERN_REUSE,
    TokenOptimizer,
)
from adaptive_router.patterns.catalog import STOREFRONT


class BrokenCache(OptimizationCache):
    """Cache whose lookups always fail."""

    async def get(self, requirements, context):
        raise CacheError("cache unavailable")


@pytest.fixture
def optimizer(clock) -> TokenOptimizer:
    """Optimizer with a fresh cache."""
    return TokenOptimizer(cache=OptimizationCache(max_size=10, clock=clock))


@pytest.fixture
def commerce_requirements(store_requirements) -> Requirements:
    """Store requirements with a detected domain."""
    return store_requirements.model_copy(update={"domain": "ecommerce"})


class TestOptimize:
    """Test plan building."""

    @pytest.mark.asyncio
    async def test_should_save_tokens_for_known_domain(
        self, optimizer, commerce_requirements, entrepreneur_context
    ):
        """Test pattern reuse and compression produce savings."""
        result = await optimizer.optimize(commerce_requirements, entrepreneur_context)
        plan = result.plan

        assert "storefront" in plan.patterns_used
        assert PATTERN_REUSE in [o.type for o in plan.optimizations]
        assert plan.token_savings.optimized < plan.token_savings.baseline
        assert plan.savings_percentage >= 30
        assert result.cached is True
        assert result.cache_hit is False

    @pytest.mark.asyncio
    async def test_should_return_cached_plan(
        self, optimizer, commerce_requirements, entrepreneur_context
    ):
        """Test second identical request hits the cache."""
        first = await optimizer.optimize(commerce_requirements, entrepreneur_context)
        second = await optimizer.optimize(commerce_requirements, entrepreneur_context)

        assert second.cache_hit is True
        assert second.plan == first.plan
        assert optimizer.get_stats()["summary"].total_optimizations == 1

    @pytest.mark.asyncio
    async def test_should_handle_empty_request(self, optimizer):
        """Test no requirements and no context."""
        result = await optimizer.optimize(None, None)

        assert result.fallback is False
        assert result.plan.patterns_used == []
        assert result.plan.recommendations

    @pytest.mark.asyncio
    async def test_should_fall_back_when_cache_fails(
        self, commerce_requirements, entrepreneur_context
    ):
        """Test failures yield an unoptimized plan."""
        optimizer = TokenOptimizer(cache=BrokenCache())

        result = await optimizer.optimize(commerce_requirements, entrepreneur_context)

        assert result.fallback is True
        assert result.token_savings.saved == 0
        assert result.plan.token_savings.baseline > 0
        assert FALLBACK in optimizer.get_stats()["breakdown"]


class TestBuildOptimizations:
    """Test optimization selection."""

    def test_should_cap_pattern_reuse_at_full_slot(self, optimizer):
        """Test pattern savings above one slot."""
        optimizations = optimizer.build_optimizations(
            [ApplicablePattern(pattern=STOREFRONT, score=1.0)], CompressedContext()
        )

        assert [o.type for o in optimizations] == [PATTERN_REUSE]
        assert optimizations[0].savings_percentage == 100.0

    def test_should_skip_small_compression(self, optimizer):
        """Test compression at or below 20% is not an optimization."""
        assert optimizer.build_optimizations(
            [], CompressedContext(compression_ratio=0.2)
        ) == []

    def test_should_add_compression(self, optimizer):
        """Test meaningful compression."""
        optimizations = optimizer.build_optimizations(
            [], CompressedContext(compression_ratio=0.5)
        )

        assert optimizations[0].type == CONTEXT_COMPRESSION
        assert optimizations[0].savings_percentage == 50.0


class TestMaintenance:
    """Test statistics and maintenance."""

    @pytest.mark.asyncio
    async def test_should_report_stats(
        self, optimizer, commerce_requirements, entrepreneur_context
    ):
        """Test stats sections."""
        await optimizer.optimize(commerce_requirements, entrepreneur_context)

        stats = optimizer.get_stats()

        assert stats["pattern_count"] == 8
        assert stats["compression"].total_compressions == 1
        assert stats["trends"]["count"] == 1

    @pytest.mark.asyncio
    async def test_should_export_data(
        self, optimizer, commerce_requirements, entrepreneur_context
    ):
        """Test export contains cache entries."""
        await optimizer.optimize(commerce_requirements, entrepreneur_context)

        data = await optimizer.export_optimization_data()

        assert len(data["cache"]) == 1
        assert data["stats"]["summary"].total_optimizations == 1

    @pytest.mark.asyncio
    async def test_should_reset_and_clear(
        self, optimizer, commerce_requirements, entrepreneur_context
    ):
        """Test reset and cache clear."""
        await optimizer.optimize(commerce_requirements, entrepreneur_context)

        optimizer.reset_stats()
        await optimizer.clear_cache()

        assert optimizer.get_stats()["summary"].total_optimizations == 0
        assert (await optimizer.cache.get_stats()).size == 0
