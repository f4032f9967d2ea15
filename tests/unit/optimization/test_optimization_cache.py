"""Test optimization plan cache."""

import asyncio

import pytest

from adaptive_router.models.requirements import Complexity, Requirements
from adaptive_router.optimization.cache import OptimizationCache


def requirements(name: str) -> Requirements:
    """Distinct requirements per name."""
    return Requirements(explicit=[name])


@pytest.fixture
def cache(clock) -> OptimizationCache:
    """Small cache driven by a fake clock."""
    return OptimizationCache(
        max_size=2, ttl_seconds=60, min_savings_threshold=30, clock=clock
    )


class TestCacheKey:
    """Test cache key generation."""

    def test_should_be_deterministic(self, store_requirements, entrepreneur_context):
        """Test same inputs give same key."""
        first = OptimizationCache.generate_cache_key(
            store_requirements, entrepreneur_context
        )
        second = OptimizationCache.generate_cache_key(
            store_requirements, entrepreneur_context
        )
        assert first == second
        assert first.startswith("opt:")

    def test_should_differ_by_requirements(self):
        """Test different requirements give different keys."""
        assert OptimizationCache.generate_cache_key(
            requirements("a"), None
        ) != OptimizationCache.generate_cache_key(requirements("b"), None)

    @pytest.mark.parametrize(
        "changes",
        [
            {"implicit": ["payments"]},
            {"domain": "blog"},
            {"complexity": Complexity.HIGH},
        ],
    )
    def test_should_differ_by_each_requirement_field(self, changes):
        """Test one changed requirement field gives a different key."""
        base = Requirements(explicit=["cart"], implicit=["auth"], domain="ecommerce")
        assert OptimizationCache.generate_cache_key(
            base, None
        ) != OptimizationCache.generate_cache_key(base.model_copy(update=changes), None)

    @pytest.mark.parametrize(
        "changes",
        [
            {"user_type": "creative"},
            {"technical_level": "expert"},
            {"scale": "large"},
        ],
    )
    def test_should_differ_by_each_context_field(self, entrepreneur_context, changes):
        """Test one changed context field gives a different key."""
        base = Requirements(explicit=["cart"])
        assert OptimizationCache.generate_cache_key(
            base, entrepreneur_context
        ) != OptimizationCache.generate_cache_key(
            base, entrepreneur_context.model_copy(update=changes)
        )


class TestSavingsGate:
    """Test the savings threshold."""

    @pytest.mark.asyncio
    async def test_should_not_cache_below_threshold(self, cache, plan_factory):
        """Test 20% savings are not cached."""
        stored = await cache.set(requirements("a"), None, plan_factory(20))

        assert stored is False
        assert await cache.get(requirements("a"), None) is None

    @pytest.mark.asyncio
    async def test_should_cache_at_threshold(self, cache, plan_factory):
        """Test 30% savings are cached."""
        plan = plan_factory(30)
        assert await cache.set(requirements("a"), None, plan) is True
        assert await cache.get(requirements("a"), None) == plan


class TestLru:
    """Test LRU eviction."""

    @pytest.mark.asyncio
    async def test_should_evict_least_recently_used(self, cache, plan_factory):
        """Test reading an entry protects it from eviction."""
        await cache.set(requirements("a"), None, plan_factory(50))
        await cache.set(requirements("b"), None, plan_factory(50))
        await cache.get(requirements("a"), None)

        await cache.set(requirements("c"), None, plan_factory(50))

        assert await cache.has(requirements("a"), None)
        assert not await cache.has(requirements("b"), None)
        assert await cache.has(requirements("c"), None)
        assert (await cache.get_stats()).eviction_count == 1

    @pytest.mark.asyncio
    async def test_should_replace_key_without_eviction(self, cache, plan_factory):
        """Test overwriting a key."""
        await cache.set(requirements("a"), None, plan_factory(40))
        await cache.set(requirements("b"), None, plan_factory(50))
        await cache.set(requirements("a"), None, plan_factory(60))

        stats = await cache.get_stats()
        assert stats.size == 2
        assert stats.eviction_count == 0
        plan = await cache.get(requirements("a"), None)
        assert plan.savings_percentage == 60

    @pytest.mark.asyncio
    async def test_should_stay_bounded_under_concurrency(self, clock, plan_factory):
        """Test concurrent writers never exceed capacity."""
        cache = OptimizationCache(max_size=10, clock=clock)

        await asyncio.gather(
            *[
                cache.set(requirements(f"r{i}"), None, plan_factory(50))
                for i in range(50)
            ]
        )

        stats = await cache.get_stats()
        assert stats.size == 10
        assert stats.eviction_count == 40


class TestTtl:
    """Test expiry."""

    @pytest.mark.asyncio
    async def test_should_miss_after_ttl(self, cache, clock, plan_factory):
        """Test expired entries count as misses."""
        await cache.set(requirements("a"), None, plan_factory(50))
        clock.advance(61)

        assert await cache.get(requirements("a"), None) is None
        stats = await cache.get_stats()
        assert stats.miss_count == 1
        assert stats.size == 0

    @pytest.mark.asyncio
    async def test_should_expire_with_real_clock(self, plan_factory):
        """Test short TTL against wall time."""
        cache = OptimizationCache(ttl_seconds=0.05, min_savings_threshold=0)
        await cache.set(requirements("a"), None, plan_factory(50))
        assert await cache.get(requirements("a"), None) is not None

        await asyncio.sleep(0.15)

        assert await cache.get(requirements("a"), None) is None

    @pytest.mark.asyncio
    async def test_should_cleanup_expired(self, cache, clock, plan_factory):
        """Test bulk expiry."""
        await cache.set(requirements("a"), None, plan_factory(50))
        clock.advance(30)
        await cache.set(requirements("b"), None, plan_factory(50))
        clock.advance(31)

        removed = await cache.cleanup_expired()

        assert removed == 1
        stats = await cache.get_stats()
        assert stats.size == 1
        assert stats.expired_count == 1


class TestStatistics:
    """Test statistics and maintenance."""

    @pytest.mark.asyncio
    async def test_should_count_hits_and_misses(self, cache, plan_factory):
        """Test hit ratio."""
        await cache.set(requirements("a"), None, plan_factory(50))
        await cache.get(requirements("a"), None)
        await cache.get(requirements("missing"), None)

        stats = await cache.get_stats()

        assert stats.hit_count == 1
        assert stats.miss_count == 1
        assert stats.hit_ratio == 50.0
        assert stats.memory_usage > 0

    @pytest.mark.asyncio
    async def test_should_not_touch_counters_on_has(self, cache):
        """Test has is side-effect free."""
        await cache.has(requirements("a"), None)
        assert (await cache.get_stats()).total_requests == 0

    @pytest.mark.asyncio
    async def test_should_clear_entries_and_counters(self, cache, plan_factory):
        """Test clear."""
        await cache.set(requirements("a"), None, plan_factory(50))
        await cache.get(requirements("a"), None)

        await cache.clear()

        stats = await cache.get_stats()
        assert stats.size == 0
        assert stats.hit_count == 0

    @pytest.mark.asyncio
    async def test_should_evict_when_shrinking(self, cache, plan_factory):
        """Test update_config shrinks capacity."""
        await cache.set(requirements("a"), None, plan_factory(50))
        await cache.set(requirements("b"), None, plan_factory(50))

        settings = await cache.update_config(max_size=1, min_savings_threshold=-5)

        assert settings["max_size"] == 1
        assert settings["min_savings_threshold"] == 0.0
        assert not await cache.has(requirements("a"), None)
        assert await cache.has(requirements("b"), None)

    @pytest.mark.asyncio
    async def test_should_filter_entries(self, cache, plan_factory):
        """Test criteria listing sorted by savings."""
        await cache.set(requirements("a"), None, plan_factory(40))
        await cache.set(requirements("b"), None, plan_factory(80, domain="blog"))

        everything = await cache.get_entries_by_criteria()
        blog = await cache.get_entries_by_criteria(domain="blog")
        rich = await cache.get_entries_by_criteria(min_savings=50)

        assert [e["savings_percentage"] for e in everything] == [80, 40]
        assert len(blog) == 1
        assert len(rich) == 1


class TestExportImport:
    """Test persistence helpers."""

    @pytest.mark.asyncio
    async def test_should_restore_exported_entries(self, cache, clock, plan_factory):
        """Test export then import into a fresh cache."""
        await cache.set(requirements("a"), None, plan_factory(50))
        records = await cache.export_entries()
        assert "lastAccessed" in records[0]

        restored = OptimizationCache(max_size=2, ttl_seconds=60, clock=clock)
        count = await restored.import_entries(records)

        assert count == 1
        plan = await restored.get(requirements("a"), None)
        assert plan.savings_percentage == 50

    @pytest.mark.asyncio
    async def test_should_skip_malformed_and_expired_records(
        self, cache, clock, plan_factory
    ):
        """Test bad records are ignored."""
        await cache.set(requirements("a"), None, plan_factory(50))
        records = await cache.export_entries()
        clock.advance(120)
        await cache.set(requirements("b"), None, plan_factory(50))
        records += await cache.export_entries()

        fresh = OptimizationCache(max_size=5, ttl_seconds=60, clock=clock)
        count = await fresh.import_entries(records + [{"key": "x"}, "garbage"])

        assert count == 1
        assert await fresh.has(requirements("b"), None)
