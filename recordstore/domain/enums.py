"""Domain enumerations for records."""

from enum import Enum


class RecordStatus(str, Enum):
    """Record lifecycle status.

    Stored as its string value; callers decide what each status allows.
    """

    NORMAL = "normal"
    DISABLED = "disabled"
    DELETED = "deleted"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings.

        Returns:
            List of enum value strings (e.g. for validation or serialization).
        """
        return [status.value for status in cls]
