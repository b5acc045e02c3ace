from __future__ import annotations

from functools import lru_cache

import redis

from privlearn.core.config import settings


@lru_cache(maxsize=4)
def _pool(url: str) -> redis.ConnectionPool:
    return redis.ConnectionPool.from_url(url, decode_responses=True, socket_connect_timeout=2, socket_timeout=2)


def get_redis() -> redis.Redis:
    """Client on a shared pool, one pool per configured URL."""
    return redis.Redis(connection_pool=_pool(settings.redis_url))
