"""Organization models."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.mixins import TimestampMixin, uuid_column


class Organization(TimestampMixin, Base):
    """Top-level tenant boundary."""

    __tablename__ = "organizations"

    id: Mapped[str] = uuid_column()
    name: Mapped[str] = mapped_column(String(1024))
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id"))


class OrgMember(TimestampMixin, Base):
    """Non-owner member of an organization."""

    __tablename__ = "org_members"

    org_id: Mapped[str] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), primary_key=True
    )
    member_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    role: Mapped[str] = mapped_column(String(20))
