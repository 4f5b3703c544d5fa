"""Shared model helpers."""

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column


def utc_now() -> datetime:
    """Return the current UTC time.

    Returns
    -------
    datetime
        Timezone-aware current time.
    """
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Return a freshly generated identifier.

    Returns
    -------
    str
        Canonical UUID4 string.
    """
    return str(uuid.uuid4())


class TimestampMixin:
    """Common timestamp columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )


def uuid_column() -> Mapped[str]:
    """Return a UUID-string primary-key column.

    Identifiers are stored as canonical strings because clients may supply
    them and backups carry them verbatim.

    Returns
    -------
    Mapped[str]
        SQLAlchemy mapped string column.
    """
    return mapped_column(String(36), primary_key=True, default=new_id)


def sequential_stamps(count: int) -> list[datetime]:
    """Return ``count`` strictly increasing creation timestamps.

    Rows created in one bulk call share a clock reading; the microsecond
    offsets keep their creation order equal to the request order.

    Parameters
    ----------
    count : int
        Number of timestamps.

    Returns
    -------
    list[datetime]
        Timestamps in ascending order.
    """
    base = utc_now()
    return [base + timedelta(microseconds=index) for index in range(count)]
