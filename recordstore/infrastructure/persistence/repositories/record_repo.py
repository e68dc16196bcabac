"""Record repository: cache-aside reads and invalidating writes over RecordStore.

Read path: cache, then (on miss) one deduplicated store query per id,
then populate the cache with the record or a not-found marker. Batch path:
one MGET, one IN query for the misses, one pipelined write-back. Write path:
store first, then delete the cache entry.

Cache failures never fail a request: they are logged with operation and
key and the call falls back to the store. Store failures propagate.

A read that loaded a record before a concurrent update committed can write
that stale copy back after the update's delete; it lives until the TTL
expires. This is the accepted staleness window of cache-aside.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from recordstore.application.dtos.record import RecordCreate, RecordPatch, RecordResult
from recordstore.application.interfaces.repositories import IRecordStore
from recordstore.domain.exceptions import RecordNotFoundException
from recordstore.infrastructure.cache.record_cache import (
    CacheEntry,
    CacheEntryKind,
    RecordCache,
)
from recordstore.infrastructure.cache.keys import is_record_id
from recordstore.infrastructure.cache.request_gate import RequestGate
from recordstore.infrastructure.exceptions import CacheDegradedError
from recordstore.shared.telemetry.tracing import (
    add_span_attributes,
    add_span_event,
    traced,
)

logger = logging.getLogger(__name__)


class RecordRepository:
    """Sole entry point for reading and mutating records.

    Dependencies are injected: the store, an optional record cache (None
    disables caching), and the request gate shared by all single-record
    reads in this process.
    """

    def __init__(
        self,
        store: IRecordStore,
        cache: RecordCache | None = None,
        gate: RequestGate | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.gate = gate or RequestGate()

    async def _absorb(
        self,
        operation: str,
        key: object,
        call: Callable[[], Awaitable[None]],
    ) -> None:
        """Run a best-effort cache write; log CacheDegradedError instead of raising."""
        if self.cache is None:
            return
        try:
            await call()
        except CacheDegradedError as e:
            logger.warning("Cache %s failed for record %s: %s", operation, key, e.message)
            add_span_event("cache.degraded", {"operation": operation})

    async def _lookup(self, record_id: int) -> CacheEntry:
        if self.cache is None:
            return CacheEntry.absent()
        try:
            return await self.cache.get(record_id)
        except CacheDegradedError as e:
            logger.warning(
                "Cache get failed for record %s, reading store: %s", record_id, e.message
            )
            add_span_event("cache.degraded", {"operation": "get"})
            return CacheEntry.absent()

    async def _lookup_many(self, record_ids: list[int]) -> dict[int, CacheEntry]:
        if self.cache is None:
            return {}
        try:
            return await self.cache.get_many(record_ids)
        except CacheDegradedError as e:
            logger.warning(
                "Cache get_many failed for %s records, reading store: %s",
                len(record_ids),
                e.message,
            )
            add_span_event("cache.degraded", {"operation": "get_many"})
            return {}

    async def _load(self, record_id: int) -> RecordResult | None:
        """Store read for one id plus cache population. Runs once per in-flight id."""
        record = await self.store.get_by_id(record_id)
        if record is None:
            await self._absorb(
                "set_not_found", record_id, lambda: self.cache.set_not_found(record_id)
            )
            return None
        await self._absorb("set", record_id, lambda: self.cache.set(record))
        return record

    @traced("record_repo.get_record")
    async def get_record(self, record_id: int) -> RecordResult | None:
        """Return record by id, or None if it does not exist.

        Anything other than a positive int returns None. Cache hit and
        not-found marker are answered without touching the store. On a
        miss, concurrent callers for the same id share a single store query
        through the request gate.

        Raises:
            StoreFailureException: The store query failed (nothing is cached).
        """
        if not is_record_id(record_id):
            return None
        entry = await self._lookup(record_id)
        add_span_attributes(**{"cache.result": entry.kind.value})
        if entry.kind is CacheEntryKind.HIT:
            return entry.record
        if entry.kind is CacheEntryKind.NEGATIVE:
            return None
        return await self.gate.run_once(record_id, lambda: self._load(record_id))

    @traced("record_repo.batch_get_records")
    async def batch_get_records(self, record_ids: Iterable[int]) -> list[RecordResult]:
        """Return the existing records among record_ids, in input order.

        Duplicates collapse to one result and values that are not positive
        ints are skipped. Ids with no record (cached not-found marker or
        missing from the store) are omitted. Misses are fetched with a single
        store query and are not deduplicated against concurrent callers.

        Raises:
            StoreFailureException: The batch store query failed.
        """
        ids = list(dict.fromkeys(i for i in record_ids if is_record_id(i)))
        if not ids:
            return []
        entries = await self._lookup_many(ids)
        found: dict[int, RecordResult] = {}
        missed: list[int] = []
        for record_id in ids:
            entry = entries.get(record_id)
            if entry is None or entry.kind is CacheEntryKind.ABSENT:
                missed.append(record_id)
            elif entry.kind is CacheEntryKind.HIT and entry.record is not None:
                found[record_id] = entry.record
        add_span_attributes(**{"cache.hits": len(ids) - len(missed), "cache.misses": len(missed)})

        if missed:
            fetched = await self.store.get_by_ids(missed)
            for record in fetched:
                found[record.id] = record
            fetched_ids = {record.id for record in fetched}
            absent = [record_id for record_id in missed if record_id not in fetched_ids]
            await self._absorb(
                "set_many",
                f"{len(missed)} ids",
                lambda: self.cache.set_many(fetched, not_found_ids=absent),
            )
        return [found[record_id] for record_id in ids if record_id in found]

    @traced("record_repo.get_record_by_username")
    async def get_record_by_username(self, username: str) -> RecordResult | None:
        return await self.store.get_by_username(username)

    @traced("record_repo.get_record_by_email")
    async def get_record_by_email(self, email: str) -> RecordResult | None:
        return await self.store.get_by_email(email)

    @traced("record_repo.get_record_by_phone")
    async def get_record_by_phone(self, phone: str) -> RecordResult | None:
        return await self.store.get_by_phone(phone)

    @traced("record_repo.create_record")
    async def create_record(self, data: RecordCreate) -> int:
        """Insert a record and return its id.

        The cache is not populated; a leftover not-found marker under the
        new id is removed so the first read goes to the store.

        Raises:
            DuplicateKeyException: username, email or phone already taken.
            StoreFailureException: The insert failed.
        """
        created = await self.store.insert(data)
        await self._absorb("delete", created.id, lambda: self.cache.delete(created.id))
        logger.info("Record created: %s", created.id)
        return created.id

    @traced("record_repo.update_record")
    async def update_record(self, record_id: int, patch: RecordPatch) -> RecordResult:
        """Apply patch to the record, then delete its cache entry.

        The entry is deleted, never rewritten, and the in-flight read for
        the id (if any) stops being shared, so later reads load the
        committed row. A failed delete is logged, not raised.

        Returns:
            The updated record as stored.

        Raises:
            RecordNotFoundException: No record with record_id.
            DuplicateKeyException: The patch collides with another record.
            StoreFailureException: The update failed.
        """
        current = await self.get_record(record_id)
        if current is None:
            raise RecordNotFoundException(record_id)
        changes = patch.changes()
        if not changes:
            return current
        updated = await self.store.update_fields(record_id, changes)
        if updated is None:
            raise RecordNotFoundException(record_id)
        self.gate.forget(record_id)
        await self._absorb("delete", record_id, lambda: self.cache.delete(record_id))
        logger.info("Record updated: %s (%s)", record_id, ", ".join(sorted(changes)))
        return updated
