from __future__ import annotations

import asyncio

import pytest

from cryptofav.utils.cache import TTLCache


def test_get_returns_value_until_expiry(cache, clock):
    cache.set("coingecko.asset.bitcoin", {"id": "bitcoin"}, ttl_seconds=60)

    clock.advance(59)
    assert cache.get("coingecko.asset.bitcoin") == {"id": "bitcoin"}

    clock.advance(1)
    assert cache.get("coingecko.asset.bitcoin") is None
    assert cache.stats() == {"entries": 0, "live": 0}


def test_set_overwrites_and_restarts_ttl(cache, clock):
    cache.set("k", 1, ttl_seconds=60)
    clock.advance(50)
    cache.set("k", 2, ttl_seconds=60)
    clock.advance(50)
    assert cache.get("k") == 2


@pytest.mark.asyncio
async def test_remember_computes_once_within_ttl(cache, clock):
    calls = []

    async def compute():
        calls.append(1)
        return [len(calls)]

    assert await cache.remember("k", 60, compute) == [1]
    assert await cache.remember("k", 60, compute) == [1]
    clock.advance(61)
    assert await cache.remember("k", 60, compute) == [2]
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_remember_does_not_store_failures(cache):
    async def boom():
        raise RuntimeError("upstream down")

    with pytest.raises(RuntimeError):
        await cache.remember("k", 60, boom)
    assert cache.get("k") is None


@pytest.mark.asyncio
async def test_concurrent_misses_share_one_computation():
    cache = TTLCache()
    calls = []

    async def slow():
        calls.append(1)
        await asyncio.sleep(0.01)
        return "value"

    results = await asyncio.gather(*(cache.remember("k", 60, slow) for _ in range(5)))

    assert results == ["value"] * 5
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_remember_releases_per_key_locks(cache):
    async def ok():
        return "value"

    async def boom():
        raise RuntimeError("upstream down")

    await cache.remember("hit", 60, ok)
    with pytest.raises(RuntimeError):
        await cache.remember("miss", 60, boom)

    assert cache._locks == {}
    assert cache._waiters == {}


@pytest.mark.asyncio
async def test_lock_released_after_concurrent_waiters_finish():
    cache = TTLCache()

    async def slow():
        await asyncio.sleep(0.01)
        return "value"

    await asyncio.gather(*(cache.remember("k", 60, slow) for _ in range(3)))

    assert cache._locks == {}
