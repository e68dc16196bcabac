"""Cache protocol for the record cache (DIP). CacheService is the Redis implementation."""

from collections.abc import Mapping
from typing import Any, Protocol


class CacheProtocol(Protocol):
    """Protocol for JSON key-value cache backends with per-key TTL.

    Implementations raise CacheDegradedError on any backend failure;
    a missing key is not a failure.
    """

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""
        ...

    async def get(self, key: str) -> Any:
        """Return cached value or None."""
        ...

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        """Return {key: value} for the keys that are present."""
        ...

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Store value with TTL in seconds."""
        ...

    async def set_many(self, values: Mapping[str, Any], ttl: int) -> None:
        """Store every value with the same TTL."""
        ...

    async def delete(self, key: str) -> None:
        """Remove key from cache."""
        ...
