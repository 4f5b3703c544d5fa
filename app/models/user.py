"""User and access token models."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.mixins import TimestampMixin, uuid_column


class User(TimestampMixin, Base):
    """Platform user identity."""

    __tablename__ = "users"

    id: Mapped[str] = uuid_column()
    email: Mapped[str] = mapped_column(String(254), unique=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)


class AccessToken(TimestampMixin, Base):
    """Bearer token issued to a user."""

    __tablename__ = "access_tokens"
    __table_args__ = (
        Index("ix_access_tokens_lookup", "token_lookup"),
        UniqueConstraint("user_id", "name", name="uq_access_tokens_user_name"),
    )

    id: Mapped[str] = uuid_column()
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(255))
    token_hash: Mapped[str] = mapped_column(String(512))
    token_lookup: Mapped[str] = mapped_column(String(64))
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
