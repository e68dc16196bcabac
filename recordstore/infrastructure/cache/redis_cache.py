"""Redis-based cache service for the record cache.

Provides async Redis caching with TTL support, JSON values, batch get
(MGET) and batch set (pipelined SETEX). Every backend failure is raised
as CacheDegradedError so the caller can decide how to degrade; a missing
key is returned as None / left out of the result.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import redis.asyncio as redis

from recordstore.core.config import Settings, get_settings
from recordstore.infrastructure.exceptions import CacheDegradedError

logger = logging.getLogger(__name__)


class CacheService:
    """Async Redis cache service with TTL support.

    Call connect() at startup and disconnect() at shutdown. When a client is
    injected (tests, DI) it is used as-is and never recreated on reconnect.

    An owned client that is lost (Redis down at startup, failed reconnect)
    is reconnected lazily on a later command, at most once per
    redis_reconnect_interval_seconds, until disconnect() is called.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional Redis client for testing or DI.
            settings: Optional settings; get_settings() is used on connect() otherwise.
        """
        self.redis = redis_client
        self._settings = settings
        self._owns_client = redis_client is None
        self._connected = redis_client is not None
        self._last_connect_attempt: float | None = None
        self._closed = False

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self.redis is not None:
            return
        settings = self.settings
        self._closed = False
        self._last_connect_attempt = time.monotonic()
        try:
            self.redis = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                db=settings.redis_db,
                password=settings.redis_password.get_secret_value() if settings.redis_password else None,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=settings.redis_socket_timeout,
                socket_keepalive=True,
                max_connections=settings.redis_max_connections,
            )
            await self.redis.ping()
            self._connected = True
            self._owns_client = True
            logger.info(
                "Redis cache connected: %s:%s",
                settings.redis_host,
                settings.redis_port,
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning(
                "Redis connection failed: %s. Cache disabled.",
                e,
            )
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        self._closed = True
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache disconnected")

    async def _reconnect(self) -> bool:
        """Attempt to reconnect an owned client. Returns True if reconnected."""
        if self.redis is None or not self._owns_client:
            return False
        try:
            await self.redis.aclose()
        except redis.RedisError:
            pass
        self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    async def _ensure_connected(self) -> None:
        """Retry connect() for a lost owned client once the reconnect interval has passed."""
        if self.is_available() or not self._owns_client or self._closed:
            return
        if self._last_connect_attempt is None:
            return
        elapsed = time.monotonic() - self._last_connect_attempt
        if elapsed < self.settings.redis_reconnect_interval_seconds:
            return
        logger.info("Retrying Redis connection after %.1fs", elapsed)
        try:
            await self.connect()
        except redis.RedisError as e:
            logger.warning("Redis reconnect failed: %s", e)
            self._connected = False
            self.redis = None

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    async def _execute(
        self,
        operation: str,
        key: str,
        command: Callable[[redis.Redis], Awaitable[Any]],
    ) -> Any:
        """Run command against Redis, retrying once after a reconnect.

        Raises:
            CacheDegradedError: Cache unavailable or the command failed.
        """
        await self._ensure_connected()
        if not self.is_available() or self.redis is None:
            raise CacheDegradedError(operation, key, "cache unavailable")
        try:
            return await command(self.redis)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            if await self._reconnect() and self.redis is not None:
                try:
                    return await command(self.redis)
                except redis.RedisError as retry_error:
                    raise CacheDegradedError(
                        operation, key, f"{retry_error} (after reconnect)"
                    ) from retry_error
            raise CacheDegradedError(operation, key, str(e)) from e
        except redis.RedisError as e:
            raise CacheDegradedError(operation, key, str(e)) from e

    @staticmethod
    def _decode(operation: str, key: str, raw: str) -> Any:
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            raise CacheDegradedError(operation, key, f"undecodable value: {e}") from e

    @staticmethod
    def _encode(operation: str, key: str, value: Any) -> str:
        try:
            return json.dumps(value)
        except (TypeError, ValueError) as e:
            raise CacheDegradedError(operation, key, f"unserializable value: {e}") from e

    async def get(self, key: str) -> Any | None:
        """Return cached value (JSON-deserialized) or None if missing.

        Args:
            key: Cache key (use recordstore.infrastructure.cache.keys builders).

        Returns:
            Cached value or None.

        Raises:
            CacheDegradedError: Redis unavailable or value not valid JSON.
        """
        raw = await self._execute("get", key, lambda r: r.get(key))
        if raw is None:
            logger.debug("Cache MISS: %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return self._decode("get", key, raw)

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        """Return {key: value} for present keys in one MGET round trip.

        Missing keys are left out. An undecodable value is logged and left
        out too, so one bad entry only turns its own key into a miss.

        Raises:
            CacheDegradedError: Redis unavailable or the MGET failed.
        """
        if not keys:
            return {}
        values = await self._execute("get_many", ",".join(keys), lambda r: r.mget(keys))
        found: dict[str, Any] = {}
        for key, raw in zip(keys, values):
            if raw is None:
                continue
            try:
                found[key] = self._decode("get_many", key, raw)
            except CacheDegradedError as e:
                logger.warning("Cache entry dropped: %s", e.message)
        logger.debug("Cache MGET: %s keys, %s hits", len(keys), len(found))
        return found

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Store value with TTL.

        Args:
            key: Cache key.
            value: Value to cache (JSON-serializable).
            ttl: Time-to-live in seconds.

        Raises:
            CacheDegradedError: Redis unavailable or the write failed.
        """
        serialized = self._encode("set", key, value)
        await self._execute("set", key, lambda r: r.setex(key, ttl, serialized))
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)

    async def set_many(self, values: Mapping[str, Any], ttl: int) -> None:
        """Store every value with the same TTL in one pipelined round trip."""
        if not values:
            return
        serialized = {k: self._encode("set_many", k, v) for k, v in values.items()}

        async def _pipeline(r: redis.Redis) -> Any:
            async with r.pipeline(transaction=False) as pipe:
                for k, v in serialized.items():
                    pipe.setex(k, ttl, v)
                return await pipe.execute()

        await self._execute("set_many", ",".join(serialized), _pipeline)
        logger.debug("Cache SET_MANY: %s keys (TTL: %ss)", len(serialized), ttl)

    async def delete(self, key: str) -> None:
        """Remove key from cache.

        Raises:
            CacheDegradedError: Redis unavailable or the delete failed.
        """
        await self._execute("delete", key, lambda r: r.delete(key))
        logger.debug("Cache DELETE: %s", key)
