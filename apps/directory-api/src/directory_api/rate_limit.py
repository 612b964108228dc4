from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import Protocol
from uuid import uuid4

DEFAULT_MAX_TRACKED_KEYS = 1000


class AttemptStore(ABC):
    @abstractmethod
    async def record_attempt(self, key: str, now_seconds: float) -> None:
        raise NotImplementedError

    @abstractmethod
    async def attempts_since(self, key: str, cutoff_seconds: float) -> int:
        raise NotImplementedError

    @abstractmethod
    async def clear(self, key: str) -> None:
        raise NotImplementedError


class RedisLikeClient(Protocol):
    async def zadd(self, key: str, mapping: dict[str, float]) -> int: ...

    async def zremrangebyscore(self, key: str, min: float, max: float) -> int: ...

    async def zcard(self, key: str) -> int: ...

    async def expire(self, key: str, time: int) -> bool: ...

    async def delete(self, *keys: str) -> int: ...


class InMemoryAttemptStore(AttemptStore):
    """Per-process attempt log.

    Keys are evicted oldest-first once more than ``max_keys`` are tracked so
    a stream of distinct clients cannot grow the map without bound.
    """

    def __init__(self, max_keys: int = DEFAULT_MAX_TRACKED_KEYS) -> None:
        self._attempts: dict[str, deque[float]] = {}
        self._max_keys = max_keys

    async def record_attempt(self, key: str, now_seconds: float) -> None:
        queue = self._attempts.pop(key, None) or deque()
        queue.append(now_seconds)
        self._attempts[key] = queue
        while len(self._attempts) > self._max_keys:
            oldest = next(iter(self._attempts))
            del self._attempts[oldest]

    async def attempts_since(self, key: str, cutoff_seconds: float) -> int:
        queue = self._attempts.get(key)
        if queue is None:
            return 0
        while queue and queue[0] <= cutoff_seconds:
            queue.popleft()
        if not queue:
            del self._attempts[key]
            return 0
        return len(queue)

    async def clear(self, key: str) -> None:
        self._attempts.pop(key, None)

    def tracked_keys(self) -> int:
        return len(self._attempts)


class RedisAttemptStore(AttemptStore):
    def __init__(self, client: RedisLikeClient, window_seconds: int = 60) -> None:
        self._client = client
        self._window_seconds = window_seconds

    async def record_attempt(self, key: str, now_seconds: float) -> None:
        redis_key = self._redis_key(key)
        member = f"{now_seconds:.6f}:{uuid4()}"
        await self._client.zadd(redis_key, {member: now_seconds})
        await self._client.expire(redis_key, self._window_seconds + 5)

    async def attempts_since(self, key: str, cutoff_seconds: float) -> int:
        redis_key = self._redis_key(key)
        await self._client.zremrangebyscore(redis_key, float("-inf"), cutoff_seconds)
        return await self._client.zcard(redis_key)

    async def clear(self, key: str) -> None:
        await self._client.delete(self._redis_key(key))

    def _redis_key(self, key: str) -> str:
        return f"directory:login_attempts:{key}"


class SlidingWindowRateLimiter:
    """Allows at most ``max_attempts`` within any ``window_seconds`` span per key."""

    def __init__(
        self,
        store: AttemptStore,
        max_attempts: int = 5,
        window_seconds: int = 60,
    ) -> None:
        self._store = store
        self._max_attempts = max_attempts
        self._window_seconds = window_seconds

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    async def allow(self, key: str, now_seconds: float) -> bool:
        cutoff = now_seconds - self._window_seconds
        attempts = await self._store.attempts_since(key, cutoff)
        if attempts >= self._max_attempts:
            return False
        await self._store.record_attempt(key, now_seconds)
        return True

    async def reset(self, key: str) -> None:
        await self._store.clear(key)
