"""recordstore: cache-aside access layer for user records.

Reads go through a Redis cache with negative caching and per-key request
deduplication; writes go to the SQL store and invalidate the cache entry.
"""
