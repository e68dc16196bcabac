"""RecordStore integration tests. Require Postgres (DATABASE_URL=postgresql+asyncpg://...)."""

import uuid

import pytest

from recordstore.application.dtos.record import RecordCreate
from recordstore.domain.exceptions import DuplicateKeyException
from recordstore.infrastructure.persistence.repositories.record_store import (
    RecordStore,
)


def _unique(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


@pytest.mark.requires_db
async def test_insert_and_get(pg_session_factory) -> None:
    store = RecordStore(pg_session_factory)
    username = _unique("amy")
    created = await store.insert(
        RecordCreate(username=username, email=f"{username}@x.com", password_hash="h")
    )
    assert created.id > 0
    found = await store.get_by_id(created.id)
    assert found is not None
    assert found.username == username
    assert (await store.get_by_username(username)).id == created.id


@pytest.mark.requires_db
async def test_duplicate_email_detected(pg_session_factory) -> None:
    store = RecordStore(pg_session_factory)
    email = f"{_unique('dup')}@x.com"
    await store.insert(RecordCreate(username=_unique("a"), email=email, password_hash="h"))
    with pytest.raises(DuplicateKeyException) as exc_info:
        await store.insert(RecordCreate(username=_unique("b"), email=email, password_hash="h"))
    assert exc_info.value.details == {"field": "email"}


@pytest.mark.requires_db
async def test_get_by_ids(pg_session_factory) -> None:
    store = RecordStore(pg_session_factory)
    ids = []
    for _ in range(3):
        name = _unique("batch")
        ids.append(
            (await store.insert(RecordCreate(username=name, email=f"{name}@x.com", password_hash="h"))).id
        )
    found = await store.get_by_ids([*ids, 2**62])
    assert sorted(r.id for r in found) == sorted(ids)
