"""Core constants: cache key layout, negative-cache placeholder, default TTLs.

Single source of truth for cache key structure (DRY). Used by
recordstore.infrastructure.cache and the record repository.
"""

# Cache key prefix and namespace: record:info:<id>
CACHE_PREFIX_RECORD = "record"
CACHE_NAMESPACE_INFO = "info"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Stored instead of a record when the store confirmed the id does not exist.
NOT_FOUND_PLACEHOLDER = "*"

# Seconds
DEFAULT_RECORD_TTL = 300
DEFAULT_NOT_FOUND_TTL = 60
