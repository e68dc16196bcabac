"""Infrastructure exceptions for cache operations.

Cache errors extend RecordStoreException so they share message/error_code/
details with the domain errors, but they never reach repository callers:
RecordRepository logs them and falls back to the store.
"""

from recordstore.domain.exceptions import RecordStoreException


class CacheDegradedError(RecordStoreException):
    """Cache unreachable, timed out, or holding an unreadable entry."""

    def __init__(self, operation: str, key: str, reason: str) -> None:
        super().__init__(
            f"Cache {operation} failed for {key}: {reason}",
            "CACHE_DEGRADED",
            {"operation": operation, "key": key, "reason": reason},
        )
