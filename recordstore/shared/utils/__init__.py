"""Shared utilities: datetime."""

from recordstore.shared.utils.datetime import ensure_utc

__all__ = [
    "ensure_utc",
]
