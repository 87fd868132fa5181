"""Rate limiting по алгоритму sliding window (скользящее окно).

Notes
-----
Счётчики хранятся за интерфейсом `RateLimitStore` (`increment`/`reset`).
`InMemoryRateLimitStore` безопасен в рамках одного процесса; для нескольких
реплик используется `RedisRateLimitStore` (backend=redis).
"""

from __future__ import annotations

import threading
import time
import uuid
from collections import deque
from collections.abc import Callable
from functools import lru_cache
from typing import Protocol

from fastapi import Depends, Request, Response
from loguru import logger
from redis.asyncio import Redis

from ergotype.core.config import get_settings
from ergotype.core.errors import RateLimitError
from ergotype.db.redis import get_async_redis_client


class RateLimitStore(Protocol):
    """Хранилище счётчиков запросов по ключу клиента."""

    async def increment(self, key: str) -> int:
        """Учесть запрос и вернуть число запросов в текущем окне."""

    async def reset(self, key: str) -> None:
        """Сбросить счётчик ключа."""


class InMemoryRateLimitStore:
    """Sliding log в памяти процесса.

    Parameters
    ----------
    window_seconds : float
        Длина окна в секундах. Должна быть положительной.
    clock : Callable[[], float]
        Источник времени (монотонные секунды).
    """

    def __init__(
        self,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def _sweep(self, now: float, cutoff: float) -> None:
        # не чаще раза в окно; вызывается под self._lock
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]

    async def increment(self, key: str) -> int:
        now = self._clock()
        cutoff = now - self.window_seconds
        with self._lock:
            self._sweep(now, cutoff)
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()
            hits.append(now)
            return len(hits)

    async def reset(self, key: str) -> None:
        with self._lock:
            self._hits.pop(key, None)


class RedisRateLimitStore:
    """Sliding log в Redis (sorted set на ключ клиента)."""

    def __init__(
        self,
        client: Redis,
        *,
        window_seconds: float,
        prefix: str = "ratelimit",
    ) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.client = client
        self.window_seconds = window_seconds
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def increment(self, key: str) -> int:
        now_ts = time.time()
        redis_key = self._key(key)
        member = f"{now_ts}:{uuid.uuid4().hex}"
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.zremrangebyscore(redis_key, 0, now_ts - self.window_seconds)
            pipe.zadd(redis_key, {member: now_ts})
            pipe.zcard(redis_key)
            pipe.expire(redis_key, int(self.window_seconds) + 1)
            _, _, count, _ = await pipe.execute()
        return int(count)

    async def reset(self, key: str) -> None:
        await self.client.delete(self._key(key))


@lru_cache(maxsize=1)
def get_memory_rate_limit_store() -> InMemoryRateLimitStore:
    """Создать и закэшировать in-memory store по текущим настройкам."""

    settings = get_settings()
    return InMemoryRateLimitStore(settings.rate_limit_window_seconds)


@lru_cache(maxsize=1)
def get_redis_rate_limit_store() -> RedisRateLimitStore:
    """Создать и закэшировать Redis store."""

    settings = get_settings()
    return RedisRateLimitStore(
        get_async_redis_client(),
        window_seconds=settings.rate_limit_window_seconds,
        prefix=f"{settings.app_name}:ratelimit",
    )


def get_rate_limit_store() -> RateLimitStore:
    """FastAPI dependency: store выбранного backend'а."""

    settings = get_settings()
    if settings.rate_limit_backend.lower().strip() == "redis":
        return get_redis_rate_limit_store()
    return get_memory_rate_limit_store()


def get_client_key(request: Request) -> str:
    """Получить ключ rate limiting (адрес клиента) для запроса."""

    if get_settings().rate_limit_trust_forwarded_for:
        xff = request.headers.get("x-forwarded-for")
        if xff:
            return xff.split(",")[0].strip()
    if request.client is None:
        return "unknown"
    return request.client.host


class RateLimiter:
    """Dependency: ограничение частоты запросов к эндпоинту.

    Parameters
    ----------
    scope : str
        Имя защищаемого эндпоинта; счётчики разных scope независимы.
    """

    def __init__(self, scope: str) -> None:
        self.scope = scope

    async def __call__(
        self,
        request: Request,
        response: Response,
        store: RateLimitStore = Depends(get_rate_limit_store),
    ) -> None:
        settings = get_settings()
        if not settings.rate_limit_enabled:
            return

        client_key = get_client_key(request)
        key = f"{self.scope}:{client_key}"
        try:
            count = await store.increment(key)
        except Exception as exc:  # noqa: BLE001
            if store is get_memory_rate_limit_store():
                raise
            logger.warning("Rate limit store failed, fallback to memory: {err}", err=str(exc))
            count = await get_memory_rate_limit_store().increment(key)

        limit = settings.rate_limit_max_requests
        headers = {
            "RateLimit-Limit": str(limit),
            "RateLimit-Remaining": str(max(0, limit - count)),
        }
        if count > limit:
            logger.warning(
                "Rate limit exceeded scope={scope} client={client}",
                scope=self.scope,
                client=client_key,
            )
            raise RateLimitError(
                headers={**headers, "Retry-After": str(settings.rate_limit_window_seconds)},
            )
        response.headers.update(headers)
