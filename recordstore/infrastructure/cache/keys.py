"""Cache key builders. Single place for key format (DRY)."""

from recordstore.core.constants import (
    CACHE_KEY_SEP,
    CACHE_NAMESPACE_INFO,
    CACHE_PREFIX_RECORD,
)


def is_record_id(value: object) -> bool:
    """Return True if value is a persisted record id (a positive int, not a bool)."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _validate_record_id(record_id: int) -> None:
    """Raise ValueError unless record_id is a persisted (positive int) id.

    bool is rejected even though it is an int subclass.
    """
    if isinstance(record_id, bool) or not isinstance(record_id, int):
        raise ValueError(f"Cache key component 'record_id' must be int, got {record_id!r}")
    if record_id <= 0:
        raise ValueError(f"Cache key component 'record_id' must be positive, got {record_id}")


def record_key(record_id: int) -> str:
    """Cache key for record by ID (record:info:<id>)."""
    _validate_record_id(record_id)
    return f"{CACHE_PREFIX_RECORD}{CACHE_KEY_SEP}{CACHE_NAMESPACE_INFO}{CACHE_KEY_SEP}{record_id}"
