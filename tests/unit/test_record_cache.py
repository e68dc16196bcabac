"""Tests for RecordCache: entry kinds, TTLs, and malformed entries."""

import pytest

from recordstore.domain.enums import RecordStatus
from recordstore.infrastructure.cache.record_cache import CacheEntryKind, RecordCache
from recordstore.infrastructure.exceptions import CacheDegradedError
from tests.conftest import InMemoryCache, make_record


async def test_set_then_get_returns_hit(record_cache: RecordCache, cache_backend: InMemoryCache) -> None:
    record = make_record(1, "amy", "a@x.com", "+15550001")
    await record_cache.set(record)
    assert cache_backend.ttls["record:info:1"] == 300

    entry = await record_cache.get(1)
    assert entry.kind is CacheEntryKind.HIT
    assert entry.record == record
    assert entry.record.status is RecordStatus.NORMAL


async def test_absent(record_cache: RecordCache) -> None:
    entry = await record_cache.get(5)
    assert entry.kind is CacheEntryKind.ABSENT
    assert entry.record is None


async def test_not_found_marker(record_cache: RecordCache, cache_backend: InMemoryCache) -> None:
    await record_cache.set_not_found(5)
    assert cache_backend.data["record:info:5"] == "*"
    assert cache_backend.ttls["record:info:5"] == 60
    assert (await record_cache.get(5)).kind is CacheEntryKind.NEGATIVE


async def test_unpersisted_record_not_written(record_cache: RecordCache, cache_backend: InMemoryCache) -> None:
    await record_cache.set(make_record(0))
    await record_cache.set_many([make_record(0)])
    assert cache_backend.calls == []


async def test_malformed_entry_raises_degraded(record_cache: RecordCache, cache_backend: InMemoryCache) -> None:
    cache_backend.data["record:info:1"] = {"id": 1, "username": "amy"}
    with pytest.raises(CacheDegradedError, match="malformed"):
        await record_cache.get(1)


async def test_unexpected_value_type_raises_degraded(record_cache: RecordCache, cache_backend: InMemoryCache) -> None:
    cache_backend.data["record:info:1"] = 17
    with pytest.raises(CacheDegradedError, match="unexpected value type"):
        await record_cache.get(1)


async def test_get_many_mixed(record_cache: RecordCache, cache_backend: InMemoryCache) -> None:
    """Hits and markers are returned; missing and malformed ids are left out."""
    await record_cache.set(make_record(1))
    await record_cache.set_not_found(2)
    cache_backend.data["record:info:4"] = {"broken": True}

    entries = await record_cache.get_many([1, 2, 3, 4])
    assert set(entries) == {1, 2}
    assert entries[1].kind is CacheEntryKind.HIT
    assert entries[2].kind is CacheEntryKind.NEGATIVE
    assert cache_backend.count("get_many") == 1


async def test_get_many_empty(record_cache: RecordCache, cache_backend: InMemoryCache) -> None:
    assert await record_cache.get_many([]) == {}
    assert cache_backend.calls == []


async def test_set_many_one_write_per_ttl(record_cache: RecordCache, cache_backend: InMemoryCache) -> None:
    await record_cache.set_many([make_record(1), make_record(2)], not_found_ids=[3])
    assert cache_backend.count("set_many") == 2
    assert cache_backend.ttls == {
        "record:info:1": 300,
        "record:info:2": 300,
        "record:info:3": 60,
    }
    assert cache_backend.data["record:info:3"] == "*"


async def test_delete_removes_marker(record_cache: RecordCache, cache_backend: InMemoryCache) -> None:
    await record_cache.set_not_found(9)
    await record_cache.delete(9)
    assert "record:info:9" not in cache_backend.data
    assert (await record_cache.get(9)).kind is CacheEntryKind.ABSENT


async def test_backend_failure_propagates(record_cache: RecordCache, cache_backend: InMemoryCache) -> None:
    cache_backend.fail_ops.add("get")
    with pytest.raises(CacheDegradedError):
        await record_cache.get(1)
