"""Thing model."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.mixins import TimestampMixin, uuid_column


class Thing(TimestampMixin, Base):
    """Managed device instance.

    ``group_id`` always mirrors the group of ``profile_id``; it is stored so
    group-scoped queries avoid a join.
    """

    __tablename__ = "things"
    __table_args__ = (
        Index("ix_things_group_id", "group_id"),
        Index("ix_things_profile_id", "profile_id"),
    )

    id: Mapped[str] = uuid_column()
    profile_id: Mapped[str] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE")
    )
    group_id: Mapped[str] = mapped_column(ForeignKey("groups.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(1024))
    key: Mapped[str] = mapped_column(String(255), unique=True)
    external_key: Mapped[str | None] = mapped_column(String(255), unique=True)
    thing_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, default=dict
    )
