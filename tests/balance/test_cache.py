"""
Tests for the calculation cache.
"""
import asyncio

import pytest

from ombalance.balance.cache import (
    InMemoryCalculationCache,
    NullCalculationCache,
    generate_calculation_hash,
    with_calculation_cache,
)
from ombalance.core.types import CalculationCache
from ombalance.data.contracts import TimeFrame


class TestCalculationHash:

    def test_stable_for_equal_input(self, time_frame):
        same = TimeFrame(start=time_frame.start, end=time_frame.end)
        assert generate_calculation_hash("f", "1", time_frame) == generate_calculation_hash("f", "1", same)

    def test_key_order_does_not_matter(self):
        assert (generate_calculation_hash("f", "1", {"a": 1, "b": 2})
                == generate_calculation_hash("f", "1", {"b": 2, "a": 1}))

    @pytest.mark.parametrize("function_name,version,payload", [
        ("g", "1", {"a": 1}),
        ("f", "2", {"a": 1}),
        ("f", "1", {"a": 2}),
    ])
    def test_differs_on_any_part(self, function_name, version, payload):
        base = generate_calculation_hash("f", "1", {"a": 1})
        assert generate_calculation_hash(function_name, version, payload) != base

    def test_is_sha256_hex(self):
        key = generate_calculation_hash("f", "1", {})
        assert len(key) == 64
        int(key, 16)


class TestInMemoryCalculationCache:

    def test_implements_protocol(self):
        assert isinstance(InMemoryCalculationCache(), CalculationCache)
        assert isinstance(NullCalculationCache(), CalculationCache)

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            InMemoryCalculationCache(max_entries=0)

    @pytest.mark.asyncio
    async def test_computes_once(self):
        cache = InMemoryCalculationCache()
        calls = []

        async def compute():
            calls.append(1)
            return 42

        assert await cache.get_or_compute("k", compute) == 42
        assert await cache.get_or_compute("k", compute) == 42
        assert len(calls) == 1
        assert cache.stats["hits"] == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_computation(self):
        cache = InMemoryCalculationCache()
        release = asyncio.Event()
        calls = []

        async def compute():
            calls.append(1)
            await release.wait()
            return "value"

        tasks = [asyncio.ensure_future(cache.get_or_compute("k", compute)) for _ in range(5)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks)

        assert results == ["value"] * 5
        assert len(calls) == 1
        assert cache.stats["shared"] == 4

    @pytest.mark.asyncio
    async def test_failures_reach_all_waiters_and_are_not_cached(self):
        cache = InMemoryCalculationCache()
        release = asyncio.Event()

        async def failing():
            await release.wait()
            raise RuntimeError("failed")

        tasks = [asyncio.ensure_future(cache.get_or_compute("k", failing)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        assert len(cache) == 0

        async def succeeding():
            return 1

        assert await cache.get_or_compute("k", succeeding) == 1

    @pytest.mark.asyncio
    async def test_least_recently_used_is_evicted(self):
        cache = InMemoryCalculationCache(max_entries=2)

        def value(v):
            async def compute():
                return v
            return compute

        await cache.get_or_compute("a", value(1))
        await cache.get_or_compute("b", value(2))
        await cache.get_or_compute("a", value(1))  # a is now most recent
        await cache.get_or_compute("c", value(3))

        assert len(cache) == 2

        await cache.get_or_compute("a", value(1))
        assert cache.stats["hits"] == 2

        # b was evicted and is computed again
        await cache.get_or_compute("b", value(2))
        assert cache.stats["misses"] == 4


class TestWithCalculationCache:

    @pytest.mark.asyncio
    async def test_caches_sync_function(self, time_frame):
        calls = []

        def days(tf: TimeFrame) -> int:
            calls.append(tf)
            return (tf.end - tf.start).days

        cached = with_calculation_cache(days, "days", "1", InMemoryCalculationCache())

        assert await cached(time_frame) == 364
        assert await cached(TimeFrame(start=time_frame.start, end=time_frame.end)) == 364
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_caches_coroutine_function(self, time_frame):
        calls = []

        async def days(tf: TimeFrame) -> int:
            calls.append(tf)
            return (tf.end - tf.start).days

        cached = with_calculation_cache(days, "days", "1", InMemoryCalculationCache())

        assert await cached(time_frame) == 364
        assert await cached(time_frame) == 364
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_version_change_recomputes(self, time_frame):
        calls = []
        cache = InMemoryCalculationCache()

        def days(tf):
            calls.append(tf)
            return 1

        await with_calculation_cache(days, "days", "1", cache)(time_frame)
        await with_calculation_cache(days, "days", "2", cache)(time_frame)
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_without_cache_always_computes(self, time_frame):
        calls = []

        def days(tf):
            calls.append(tf)
            return 1

        cached = with_calculation_cache(days, "days", "1")
        await cached(time_frame)
        await cached(time_frame)
        assert len(calls) == 2
        assert cached.__name__ == "days"
