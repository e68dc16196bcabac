"""Domain: record status enum and exceptions. No infrastructure imports."""

from recordstore.domain.enums import RecordStatus
from recordstore.domain.exceptions import (
    DuplicateKeyException,
    RecordNotFoundException,
    RecordStoreException,
    SqlNotConfiguredException,
    StoreFailureException,
)

__all__ = [
    "DuplicateKeyException",
    "RecordNotFoundException",
    "RecordStatus",
    "RecordStoreException",
    "SqlNotConfiguredException",
    "StoreFailureException",
]
