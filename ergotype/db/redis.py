"""Redis клиент.

Важно
-----
Redis — *опциональная* зависимость: он нужен только для распределённых
счётчиков rate limit (`RATE_LIMIT_BACKEND=redis`). При ошибках Redis
лимитер откатывается на in-memory store.
"""

from __future__ import annotations

from redis.asyncio import ConnectionPool, Redis

from ergotype.core.config import get_settings

_pool: ConnectionPool | None = None
_client: Redis | None = None


def get_async_redis_client() -> Redis:
    """Получить singleton async Redis клиент (через pool).

    Returns
    -------
    redis.asyncio.Redis
        Клиент Redis.
    """

    global _pool, _client  # noqa: PLW0603
    if _client is not None:
        return _client

    settings = get_settings()
    _pool = ConnectionPool(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        decode_responses=True,
        max_connections=20,
    )
    _client = Redis(connection_pool=_pool)
    return _client
