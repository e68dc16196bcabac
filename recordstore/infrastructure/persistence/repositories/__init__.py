"""Persistence repositories. Re-exports for dependency injection."""

from recordstore.infrastructure.persistence.repositories.base import BaseRepository
from recordstore.infrastructure.persistence.repositories.record_repo import (
    RecordRepository,
)
from recordstore.infrastructure.persistence.repositories.record_store import (
    RecordStore,
)

__all__ = [
    "BaseRepository",
    "RecordRepository",
    "RecordStore",
]
