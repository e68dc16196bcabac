"""DTOs for record reads and writes (no dependency on ORM)."""

from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any

from recordstore.domain.enums import RecordStatus


@dataclass(frozen=True)
class RecordResult:
    """Record read-model (result of get_record, batch_get_records, etc.).

    Instances are what the cache stores, so they must stay JSON-friendly
    through recordstore.infrastructure.cache.record_cache.
    """

    id: int
    username: str
    email: str
    phone: str | None
    password_hash: str
    status: RecordStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RecordCreate:
    """Input for create_record. id and timestamps are assigned by the store."""

    username: str
    email: str
    password_hash: str
    phone: str | None = None
    status: RecordStatus = RecordStatus.NORMAL


class _Unset(Enum):
    """Marker type for RecordPatch fields left unchanged."""

    UNSET = "UNSET"


UNSET = _Unset.UNSET

# Columns that may be set to NULL by a patch.
_NULLABLE_PATCH_FIELDS = frozenset({"phone"})


@dataclass(frozen=True)
class RecordPatch:
    """Partial update. Fields left as UNSET are not written.

    phone=None clears the phone number. The other fields are NOT NULL in
    the store, so passing None for them raises ValueError.
    """

    username: str | _Unset = UNSET
    email: str | _Unset = UNSET
    phone: str | None | _Unset = UNSET
    password_hash: str | _Unset = UNSET
    status: RecordStatus | _Unset = UNSET

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) is None and f.name not in _NULLABLE_PATCH_FIELDS:
                raise ValueError(f"RecordPatch.{f.name} cannot be cleared")

    def changes(self) -> dict[str, Any]:
        """Return column -> value for the fields set on this patch."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is UNSET:
                continue
            out[f.name] = value.value if isinstance(value, RecordStatus) else value
        return out

    def is_empty(self) -> bool:
        return not self.changes()
