from __future__ import annotations

from qrmenu.application.ports.cache import CacheStore
from qrmenu.infrastructure.cache.redis_client import DEFAULT_TIMEOUT_SECONDS, get_redis_client


class RedisCacheStore(CacheStore):
    """String cache on the shared Redis client; every key carries a TTL."""

    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._timeout_seconds = timeout_seconds

    def get(self, key: str) -> str | None:
        value = get_redis_client(self._timeout_seconds).get(key)
        if value is None or isinstance(value, str):
            return value
        return value.decode("utf-8")

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        get_redis_client(self._timeout_seconds).set(key, value, ex=max(1, ttl_seconds))
