"""Group and group membership models."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.mixins import TimestampMixin, utc_now, uuid_column


class Group(TimestampMixin, Base):
    """Tenant-scoped container of profiles and things.

    ``owner_id`` is the creator; the owner role is implied by it and never
    stored as a membership row.
    """

    __tablename__ = "groups"
    __table_args__ = (Index("ix_groups_org_id", "org_id"),)

    id: Mapped[str] = uuid_column()
    org_id: Mapped[str] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE")
    )
    owner_id: Mapped[str] = mapped_column(String(36))
    name: Mapped[str] = mapped_column(String(1024))
    description: Mapped[str] = mapped_column(String(1024), default="")
    group_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, default=dict
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )


class GroupMembership(TimestampMixin, Base):
    """Role granted to a member within a group."""

    __tablename__ = "group_memberships"

    group_id: Mapped[str] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True
    )
    member_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(254), default="")
    role: Mapped[str] = mapped_column(String(20))
