"""Persistence models: ORM entities and mixins."""

from recordstore.infrastructure.persistence.models.mixins import (
    IntegerIdMixin,
    TimestampMixin,
)
from recordstore.infrastructure.persistence.models.record import Record

__all__ = [
    "Record",
    "IntegerIdMixin",
    "TimestampMixin",
]
