"""Cache: Redis service, typed record cache, key builders and request gate.

Used by RecordRepository for the cache-aside read path. Key format is in
keys.py (DRY).
"""

from recordstore.infrastructure.cache.cache_protocol import CacheProtocol
from recordstore.infrastructure.cache.keys import is_record_id, record_key
from recordstore.infrastructure.cache.record_cache import (
    CacheEntry,
    CacheEntryKind,
    RecordCache,
)
from recordstore.infrastructure.cache.redis_cache import CacheService
from recordstore.infrastructure.cache.request_gate import RequestGate

__all__ = [
    "CacheEntry",
    "CacheEntryKind",
    "CacheProtocol",
    "CacheService",
    "RecordCache",
    "RequestGate",
    "is_record_id",
    "record_key",
]
