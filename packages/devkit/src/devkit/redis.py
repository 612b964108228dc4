from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class AsyncRedisManager:
    def __init__(
        self,
        url: str,
        *,
        client_factory: Callable[[str], Any] | None = None,
    ) -> None:
        self._url = url
        self._client_factory = client_factory
        self._client: Any | None = None
        self._lock = asyncio.Lock()

    async def get_client(self) -> Any:
        async with self._lock:
            if self._client is None:
                self._client = self._new_client()
            return self._client

    async def reconnect(self) -> Any:
        async with self._lock:
            if self._client is not None:
                try:
                    await self._client.close()
                except Exception:
                    logger.warning("redis_close_failed", extra={"component": "devkit"}, exc_info=True)
            self._client = self._new_client()
            return self._client

    async def close(self) -> None:
        async with self._lock:
            if self._client is not None:
                try:
                    await self._client.close()
                finally:
                    self._client = None

    async def is_reachable(self) -> bool:
        try:
            client = await self.get_client()
            return bool(await client.ping())
        except Exception:
            logger.warning("redis_ping_failed", extra={"component": "devkit"})
            return False

    async def execute(self, operation: str, *args, **kwargs):
        client = await self.get_client()
        try:
            return await getattr(client, operation)(*args, **kwargs)
        except Exception:
            logger.warning("redis_command_failed", extra={"component": "devkit", "operation": operation})
            client = await self.reconnect()
            return await getattr(client, operation)(*args, **kwargs)

    def _new_client(self) -> Any:
        if self._client_factory is not None:
            return self._client_factory(self._url)
        import redis.asyncio as redis

        return redis.from_url(
            self._url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            health_check_interval=30,
        )

    def __getattr__(self, name: str):
        async def _call(*args, **kwargs):
            return await self.execute(name, *args, **kwargs)

        return _call


def create_redis_client(url: str | None) -> AsyncRedisManager | None:
    if not url:
        return None
    return AsyncRedisManager(url)
