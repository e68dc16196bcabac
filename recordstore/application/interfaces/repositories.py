"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from recordstore.application.dtos.record import (
        RecordCreate,
        RecordPatch,
        RecordResult,
    )


class IRecordStore(Protocol):
    """Protocol for the durable record store (SQL).

    Absence is reported as None / a missing list element; connectivity and
    query failures raise StoreFailureException; unique violations raise
    DuplicateKeyException.
    """

    async def get_by_id(self, record_id: int) -> RecordResult | None:
        """Return record by primary key, or None."""

    async def get_by_ids(self, record_ids: Iterable[int]) -> list[RecordResult]:
        """Return the records that exist among record_ids (one query, any order)."""

    async def get_by_username(self, username: str) -> RecordResult | None:
        """Return record by unique username, or None."""

    async def get_by_email(self, email: str) -> RecordResult | None:
        """Return record by unique email, or None."""

    async def get_by_phone(self, phone: str) -> RecordResult | None:
        """Return record by unique phone, or None."""

    async def insert(self, data: RecordCreate) -> RecordResult:
        """Insert a record and return it with id and timestamps assigned."""

    async def update_fields(
        self, record_id: int, changes: dict[str, Any]
    ) -> RecordResult | None:
        """Apply changes to the record; return the updated record or None if missing."""


class IRecordRepository(Protocol):
    """Protocol for the cache-aside record repository (entry point for callers)."""

    async def get_record(self, record_id: int) -> RecordResult | None:
        """Return record by id (cache first, deduplicated store fallback)."""

    async def batch_get_records(self, record_ids: Iterable[int]) -> list[RecordResult]:
        """Return existing records for record_ids in input order; absent ids omitted."""

    async def get_record_by_username(self, username: str) -> RecordResult | None:
        """Return record by username (store read)."""

    async def get_record_by_email(self, email: str) -> RecordResult | None:
        """Return record by email (store read)."""

    async def get_record_by_phone(self, phone: str) -> RecordResult | None:
        """Return record by phone (store read)."""

    async def create_record(self, data: RecordCreate) -> int:
        """Create a record and return its id."""

    async def update_record(self, record_id: int, patch: RecordPatch) -> RecordResult:
        """Apply patch to the record and invalidate its cache entry."""
