# tests/unit/infrastructure/caching/test_redis_json_cache.py
from __future__ import annotations

import json

import fakeredis.aioredis
import pytest

from ledgerwatch.infrastructure.caching import redis_client as redis_client_module
from ledgerwatch.infrastructure.caching.json_cache import (
    TTL_EDGAR_RAW_S,
    RedisJsonCache,
    read_through_json,
)


@pytest.fixture
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> fakeredis.aioredis.FakeRedis:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    # Wire the fake into the global Redis client used by the cache.
    monkeypatch.setattr(redis_client_module, "_client", fake)
    return fake


@pytest.mark.asyncio
async def test_redis_json_cache_key_shape_and_ttl(fake_redis) -> None:
    cache = RedisJsonCache(namespace="ledgerwatch:v1")
    tail = "GET:https://data.sec.gov/submissions/CIK0000320193.json"
    payload = {"cik": "0000320193"}

    await cache.set_json(tail, payload, ttl=TTL_EDGAR_RAW_S)

    full_key = f"ledgerwatch:v1:{tail}"
    assert await fake_redis.get(full_key) == json.dumps(payload, separators=(",", ":"))
    ttl = await fake_redis.ttl(full_key)
    assert 0 < ttl <= TTL_EDGAR_RAW_S
    assert await cache.get_json(tail) == payload


@pytest.mark.asyncio
async def test_redis_json_cache_remove_and_clear_only_touch_namespace(fake_redis) -> None:
    cache = RedisJsonCache(namespace="ledgerwatch:test")
    await cache.set_json("a", {"v": 1}, ttl=60)
    await cache.set_json("b", {"v": 2}, ttl=60)
    await fake_redis.set("other:key", "keep")

    await cache.remove("a")
    assert await cache.get_json("a") is None
    assert await cache.get_json("b") == {"v": 2}

    await cache.clear()
    assert await cache.get_json("b") is None
    assert await fake_redis.get("other:key") == "keep"


@pytest.mark.asyncio
async def test_read_through_populates_on_miss_only(fake_redis) -> None:
    cache = RedisJsonCache()
    calls = 0

    async def _loader() -> dict[str, int]:
        nonlocal calls
        calls += 1
        return {"n": calls}

    assert await read_through_json(cache, "k", ttl=30, loader=_loader) == {"n": 1}
    assert await read_through_json(cache, "k", ttl=30, loader=_loader) == {"n": 1}
    assert calls == 1


@pytest.mark.asyncio
async def test_read_through_does_not_cache_failures(fake_redis) -> None:
    cache = RedisJsonCache()

    async def _boom() -> dict[str, int]:
        raise RuntimeError("upstream down")

    with pytest.raises(RuntimeError):
        await read_through_json(cache, "k", ttl=30, loader=_boom)
    assert await cache.get_json("k") is None
