"""Typed record cache over a JSON cache backend.

Stores RecordResult values under record:info:<id> and a "*" placeholder for
ids the store confirmed absent. Reads come back as a CacheEntry so the
repository can branch on hit / negative / absent in one place.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from recordstore.application.dtos.record import RecordResult
from recordstore.core.constants import (
    DEFAULT_NOT_FOUND_TTL,
    DEFAULT_RECORD_TTL,
    NOT_FOUND_PLACEHOLDER,
)
from recordstore.domain.enums import RecordStatus
from recordstore.infrastructure.cache.cache_protocol import CacheProtocol
from recordstore.infrastructure.cache.keys import record_key
from recordstore.infrastructure.exceptions import CacheDegradedError

logger = logging.getLogger(__name__)


class CacheEntryKind(str, Enum):
    """What the cache holds for a record id."""

    HIT = "hit"
    NEGATIVE = "negative"
    ABSENT = "absent"


@dataclass(frozen=True)
class CacheEntry:
    """Result of a record cache lookup. record is set only for HIT."""

    kind: CacheEntryKind
    record: RecordResult | None = None

    @classmethod
    def hit(cls, record: RecordResult) -> CacheEntry:
        return cls(CacheEntryKind.HIT, record)

    @classmethod
    def negative(cls) -> CacheEntry:
        return cls(CacheEntryKind.NEGATIVE)

    @classmethod
    def absent(cls) -> CacheEntry:
        return cls(CacheEntryKind.ABSENT)


def _record_to_dict(record: RecordResult) -> dict[str, Any]:
    return {
        "id": record.id,
        "username": record.username,
        "email": record.email,
        "phone": record.phone,
        "password_hash": record.password_hash,
        "status": record.status.value,
        "created_at": record.created_at.isoformat() if record.created_at else None,
        "updated_at": record.updated_at.isoformat() if record.updated_at else None,
    }


def _record_from_cached(cached: dict[str, Any]) -> RecordResult:
    """Build a RecordResult from a cache dict; deserializes ISO datetime fields.

    Raises KeyError, TypeError or ValueError on a malformed entry.
    """
    data = dict(cached)
    for dt_field in ("created_at", "updated_at"):
        if data.get(dt_field) is not None:
            data[dt_field] = datetime.fromisoformat(data[dt_field])
    data["status"] = RecordStatus(data["status"])
    return RecordResult(**data)


def _entry_from_value(key: str, value: Any) -> CacheEntry:
    """Map a raw cached value to a CacheEntry; raise CacheDegradedError if malformed."""
    if value == NOT_FOUND_PLACEHOLDER:
        return CacheEntry.negative()
    if not isinstance(value, dict):
        raise CacheDegradedError("get", key, f"unexpected value type {type(value).__name__}")
    try:
        return CacheEntry.hit(_record_from_cached(value))
    except (KeyError, TypeError, ValueError) as e:
        raise CacheDegradedError("get", key, f"malformed record entry: {e}") from e


class RecordCache:
    """Record view over a CacheProtocol backend.

    All methods raise CacheDegradedError on backend failure. Records and
    ids that are not persisted (id <= 0) are never written.
    """

    def __init__(
        self,
        cache: CacheProtocol,
        *,
        ttl: int = DEFAULT_RECORD_TTL,
        not_found_ttl: int = DEFAULT_NOT_FOUND_TTL,
    ) -> None:
        self.cache = cache
        self.ttl = ttl
        self.not_found_ttl = not_found_ttl

    def is_available(self) -> bool:
        return self.cache.is_available()

    async def get(self, record_id: int) -> CacheEntry:
        """Return HIT with the record, NEGATIVE, or ABSENT for record_id."""
        key = record_key(record_id)
        value = await self.cache.get(key)
        if value is None:
            return CacheEntry.absent()
        return _entry_from_value(key, value)

    async def get_many(self, record_ids: Iterable[int]) -> dict[int, CacheEntry]:
        """Return {id: entry} for ids that are cached (hit or negative).

        Missing ids are left out. A malformed entry is logged and left out,
        so it is handled as a miss for that id only.
        """
        keys_by_id = {record_id: record_key(record_id) for record_id in record_ids}
        if not keys_by_id:
            return {}
        values = await self.cache.get_many(list(keys_by_id.values()))
        entries: dict[int, CacheEntry] = {}
        for record_id, key in keys_by_id.items():
            if key not in values:
                continue
            try:
                entries[record_id] = _entry_from_value(key, values[key])
            except CacheDegradedError as e:
                logger.warning("Cache entry ignored: %s", e.message)
        return entries

    async def set(self, record: RecordResult) -> None:
        """Cache record under its id with the positive TTL."""
        if record.id <= 0:
            return
        await self.cache.set(record_key(record.id), _record_to_dict(record), ttl=self.ttl)

    async def set_not_found(self, record_id: int) -> None:
        """Mark record_id as confirmed absent for the (shorter) not-found TTL."""
        await self.cache.set(
            record_key(record_id), NOT_FOUND_PLACEHOLDER, ttl=self.not_found_ttl
        )

    async def set_many(
        self,
        records: Iterable[RecordResult],
        not_found_ids: Iterable[int] = (),
    ) -> None:
        """Cache records (positive TTL) and not-found markers (not-found TTL).

        Two round trips at most, one per TTL.
        """
        positives = {
            record_key(record.id): _record_to_dict(record)
            for record in records
            if record.id > 0
        }
        negatives = {record_key(record_id): NOT_FOUND_PLACEHOLDER for record_id in not_found_ids}
        if positives:
            await self.cache.set_many(positives, ttl=self.ttl)
        if negatives:
            await self.cache.set_many(negatives, ttl=self.not_found_ttl)

    async def delete(self, record_id: int) -> None:
        """Remove the cache entry (record or not-found marker) for record_id."""
        await self.cache.delete(record_key(record_id))
