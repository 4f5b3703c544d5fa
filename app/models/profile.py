"""Device profile model."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.mixins import TimestampMixin, uuid_column


class Profile(TimestampMixin, Base):
    """Reusable device configuration template owned by a group."""

    __tablename__ = "profiles"
    __table_args__ = (Index("ix_profiles_group_id", "group_id"),)

    id: Mapped[str] = uuid_column()
    group_id: Mapped[str] = mapped_column(ForeignKey("groups.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(1024))
    config: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    profile_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, default=dict
    )
