"""Application interfaces (ports): record store and repository protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from recordstore.infrastructure.
"""

from recordstore.application.interfaces.repositories import (
    IRecordRepository,
    IRecordStore,
)

__all__ = [
    "IRecordRepository",
    "IRecordStore",
]
