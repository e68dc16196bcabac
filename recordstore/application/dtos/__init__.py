"""Application DTOs (no ORM dependency)."""

from recordstore.application.dtos.record import (
    UNSET,
    RecordCreate,
    RecordPatch,
    RecordResult,
)

__all__ = [
    "UNSET",
    "RecordCreate",
    "RecordPatch",
    "RecordResult",
]
