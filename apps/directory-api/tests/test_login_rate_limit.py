from __future__ import annotations

from collections import defaultdict

import pytest

from directory_api.rate_limit import InMemoryAttemptStore, RedisAttemptStore, SlidingWindowRateLimiter


class FakeRedis:
    def __init__(self) -> None:
        self._sets: dict[str, dict[str, float]] = defaultdict(dict)

    async def zadd(self, key: str, mapping: dict[str, float]) -> int:
        before = len(self._sets[key])
        self._sets[key].update(mapping)
        return 1 if len(self._sets[key]) > before else 0

    async def zremrangebyscore(self, key: str, min: float, max: float) -> int:
        members = self._sets[key]
        targets = [member for member, score in members.items() if min <= score <= max]
        for member in targets:
            members.pop(member, None)
        return len(targets)

    async def zcard(self, key: str) -> int:
        return len(self._sets[key])

    async def expire(self, key: str, time: int) -> bool:
        _ = (key, time)
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._sets.pop(key, None) is not None:
                removed += 1
        return removed


@pytest.mark.asyncio
async def test_five_attempts_per_window() -> None:
    limiter = SlidingWindowRateLimiter(InMemoryAttemptStore(), max_attempts=5, window_seconds=60)

    results = [await limiter.allow("client-a", now_seconds=100.0 + i) for i in range(6)]

    assert results == [True, True, True, True, True, False]
    assert await limiter.allow("client-b", now_seconds=105.0) is True


@pytest.mark.asyncio
async def test_window_slides_forward() -> None:
    limiter = SlidingWindowRateLimiter(InMemoryAttemptStore(), max_attempts=2, window_seconds=60)

    assert await limiter.allow("client-a", now_seconds=0.0)
    assert await limiter.allow("client-a", now_seconds=30.0)
    assert not await limiter.allow("client-a", now_seconds=59.0)
    assert await limiter.allow("client-a", now_seconds=60.0)


@pytest.mark.asyncio
async def test_reset_clears_attempts() -> None:
    limiter = SlidingWindowRateLimiter(InMemoryAttemptStore(), max_attempts=1, window_seconds=60)

    await limiter.allow("client-a", now_seconds=1.0)
    await limiter.reset("client-a")

    assert await limiter.allow("client-a", now_seconds=2.0)


@pytest.mark.asyncio
async def test_in_memory_store_evicts_oldest_keys() -> None:
    store = InMemoryAttemptStore(max_keys=3)

    for index in range(5):
        await store.record_attempt(f"client-{index}", now_seconds=float(index))

    assert store.tracked_keys() == 3
    assert await store.attempts_since("client-0", cutoff_seconds=-1.0) == 0
    assert await store.attempts_since("client-4", cutoff_seconds=-1.0) == 1


@pytest.mark.asyncio
async def test_redis_store_counts_within_window() -> None:
    redis = FakeRedis()
    limiter = SlidingWindowRateLimiter(RedisAttemptStore(redis, window_seconds=60), max_attempts=2, window_seconds=60)

    assert await limiter.allow("client-a", now_seconds=100.0)
    assert await limiter.allow("client-a", now_seconds=120.0)
    assert not await limiter.allow("client-a", now_seconds=150.0)
    assert await limiter.allow("client-a", now_seconds=161.0)

    await limiter.reset("client-a")
    assert await redis.zcard("directory:login_attempts:client-a") == 0
