"""Record ORM model (user info)."""

from sqlalchemy import String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from recordstore.infrastructure.persistence.database import Base
from recordstore.infrastructure.persistence.models.mixins import (
    IntegerIdMixin,
    TimestampMixin,
)


class Record(IntegerIdMixin, TimestampMixin, Base):
    """Record model. Table: record_info. Unique username, email and phone."""

    __tablename__ = "record_info"

    username: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, server_default=text("'normal'")
    )

    __table_args__ = (
        UniqueConstraint("username", name="uq_record_info_username"),
        UniqueConstraint("email", name="uq_record_info_email"),
        UniqueConstraint("phone", name="uq_record_info_phone"),
    )
