"""Record store: SQL access to record_info. Interface methods return application DTOs.

No caching here; RecordRepository layers the cache on top.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from recordstore.application.dtos.record import RecordCreate, RecordResult
from recordstore.domain.enums import RecordStatus
from recordstore.domain.exceptions import DuplicateKeyException, RecordStoreException
from recordstore.infrastructure.persistence.models.record import Record
from recordstore.infrastructure.persistence.repositories.base import BaseRepository
from recordstore.shared.utils.datetime import ensure_utc

_UNIQUE_FIELDS = ("username", "email", "phone")
_UNIQUE_MARKERS = ("unique", "duplicate")


def _record_to_result(r: Record) -> RecordResult:
    """Map ORM Record to application RecordResult."""
    return RecordResult(
        id=r.id,
        username=r.username,
        email=r.email,
        phone=r.phone,
        password_hash=r.password_hash,
        status=RecordStatus(r.status),
        created_at=ensure_utc(r.created_at),
        updated_at=ensure_utc(r.updated_at),
    )


def _duplicate_field(exc: IntegrityError) -> str | None:
    """Return the unique column named in a driver error message, if any.

    Matches both PostgreSQL ("uq_record_info_email") and SQLite
    ("record_info.email") wording.
    """
    message = str(exc.orig if exc.orig is not None else exc).lower()
    for field in _UNIQUE_FIELDS:
        if f"uq_record_info_{field}" in message or f"record_info.{field}" in message:
            return field
    return None


def _is_unique_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in message for marker in _UNIQUE_MARKERS)


class RecordStore(BaseRepository[Record]):
    """Record store. Lookups by id, unique attribute and id list; insert; partial update."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, Record)

    def _on_integrity_error(
        self, operation: str, exc: IntegrityError
    ) -> RecordStoreException:
        if _is_unique_violation(exc):
            return DuplicateKeyException(_duplicate_field(exc))
        return super()._on_integrity_error(operation, exc)

    async def get_by_id(self, record_id: int) -> RecordResult | None:
        record = await super().get_by_id(record_id)
        return _record_to_result(record) if record else None

    async def get_by_ids(self, record_ids: Iterable[int]) -> list[RecordResult]:
        return [_record_to_result(r) for r in await super().get_by_ids(record_ids)]

    async def get_by_username(self, username: str) -> RecordResult | None:
        record = await self.get_one_by("username", username)
        return _record_to_result(record) if record else None

    async def get_by_email(self, email: str) -> RecordResult | None:
        record = await self.get_one_by("email", email)
        return _record_to_result(record) if record else None

    async def get_by_phone(self, phone: str) -> RecordResult | None:
        record = await self.get_one_by("phone", phone)
        return _record_to_result(record) if record else None

    async def insert(self, data: RecordCreate) -> RecordResult:
        """Insert record; raise DuplicateKeyException on unique constraint violation."""
        record = Record(
            username=data.username,
            email=data.email,
            phone=data.phone,
            password_hash=data.password_hash,
            status=data.status.value,
        )
        created = await self.create(record)
        return _record_to_result(created)

    async def update_fields(
        self, record_id: int, changes: dict[str, Any]
    ) -> RecordResult | None:
        """Apply changes; None if the record does not exist.

        Raises DuplicateKeyException when a change collides with a unique attribute.
        """
        updated = await self.update_by_id(record_id, changes)
        return _record_to_result(updated) if updated else None
