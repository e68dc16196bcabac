"""Infrastructure: Redis cache, request gate, and SQL persistence."""
