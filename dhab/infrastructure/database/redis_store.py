"""
Redis Store - Infrastructure Layer

Thin best-effort wrapper around ``redis.asyncio``. Every command is bounded
by a timeout, and timeouts or transport failures resolve to a caller
supplied fallback instead of raising. Without a configured URL the store
runs in "always miss" mode: reads return the fallback and writes do nothing.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, TypeVar

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class RedisStore:
    """Key-value, sorted-set and list operations with bounded latency."""

    def __init__(
        self,
        url: Optional[str],
        token: Optional[str] = None,
        timeout: float = 3.0,
        client: Optional[aioredis.Redis] = None,
    ):
        """
        Initialize the store.

        Args:
            url: Redis URL (``redis://`` or ``rediss://``); None disables the store
            token: Password used when the URL does not embed one
            timeout: Upper bound in seconds for every command
            client: Pre-built client, mainly for tests
        """
        self.timeout = timeout
        self.client: Optional[aioredis.Redis]
        if client is not None:
            self.client = client
        elif url:
            options = {}
            if token:
                options["password"] = token
            self.client = aioredis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=timeout,
                socket_timeout=timeout,
                **options,
            )
        else:
            self.client = None
            logger.warning("price_store.unconfigured")

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def _execute(
        self,
        operation: str,
        key: str,
        call: Callable[[aioredis.Redis], Awaitable[T]],
        fallback: T,
    ) -> T:
        if self.client is None:
            return fallback

        try:
            return await asyncio.wait_for(call(self.client), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "price_store.timeout",
                operation=operation,
                key=key,
                timeout=self.timeout,
            )
        except (RedisError, OSError) as exc:
            logger.warning(
                "price_store.unavailable",
                operation=operation,
                key=key,
                error=str(exc),
            )
        return fallback

    async def get(self, key: str) -> Optional[str]:
        return await self._execute("get", key, lambda c: c.get(key), None)

    async def set(self, key: str, value: str) -> None:
        await self._execute("set", key, lambda c: c.set(key, value), None)

    async def zadd(self, key: str, score: float, member: str) -> None:
        await self._execute("zadd", key, lambda c: c.zadd(key, {member: score}), None)

    async def zrange_by_score(self, key: str, minimum: float, maximum: float) -> List[str]:
        """Members with ``minimum <= score <= maximum``, ascending by score."""
        result = await self._execute(
            "zrangebyscore",
            key,
            lambda c: c.zrangebyscore(key, minimum, maximum),
            [],
        )
        return list(result)

    async def zlast(self, key: str) -> Optional[str]:
        """Member with the highest score."""
        result = await self._execute("zrange", key, lambda c: c.zrange(key, -1, -1), [])
        return result[0] if result else None

    async def push_bounded(self, key: str, value: str, max_length: int) -> None:
        """Prepend ``value`` and keep only the newest ``max_length`` entries."""

        async def _push(client: aioredis.Redis) -> None:
            await client.lpush(key, value)
            await client.ltrim(key, 0, max_length - 1)

        await self._execute("lpush", key, _push, None)

    async def ping(self) -> bool:
        return bool(await self._execute("ping", "-", lambda c: c.ping(), False))

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
