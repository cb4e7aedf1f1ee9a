"""Redis-backed cache used for todo queries."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import redis

TODOS_KEY = "todos"
TODO_BY_ID_KEY = "todoById"
_TIMEOUT_SECONDS = 5


class CacheMiss(KeyError):
    """Raised when a key is not in the cache."""


class RedisCache:
    """Thin cache interface over a redis client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def get(self, key: str) -> str:
        value = self._client.get(key)
        if value is None:
            raise CacheMiss(key)
        return value.decode() if isinstance(value, bytes) else value

    def set(self, key: str, value: Any, expiration: timedelta | float | None = None) -> None:
        if isinstance(expiration, (int, float)):
            expiration = timedelta(seconds=expiration)
        ex = expiration if expiration else None
        self._client.set(key, value, ex=ex)

    def delete(self, key: str) -> None:
        self._client.delete(key)

    def close(self) -> None:
        self._client.close()


def connect_redis(config: Any, log: Any) -> RedisCache:
    """Connect to redis as configured and check it answers."""
    client = redis.Redis(
        host=config.redis.host or "localhost",
        port=int(config.redis.port or 6379),
        db=0,
        socket_timeout=_TIMEOUT_SECONDS,
        socket_connect_timeout=_TIMEOUT_SECONDS,
        decode_responses=True,
    )
    try:
        client.ping()
    except redis.RedisError:
        log.start_logger("redis.go", "NewRedis").error("error connecting to redis")
        raise
    log.start_logger("redis.go", "NewRedis").info("connected to redis")
    return RedisCache(client)