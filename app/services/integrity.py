"""Uniqueness checks shared by create and restore paths."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError
from app.models.thing import Thing


async def ensure_id_available(
    session: AsyncSession, model: Any, entity_id: str, entity: str
) -> None:
    """Raise ``ConflictError`` when ``entity_id`` is already stored.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    model : Any
        Mapped class owning the identifier.
    entity_id : str
        Identifier about to be inserted.
    entity : str
        Entity name used in the error message.

    Returns
    -------
    None
        Raises on conflict.
    """
    if await session.get(model, entity_id) is not None:
        raise ConflictError(f"{entity} {entity_id} already exists")


async def ensure_thing_keys_available(
    session: AsyncSession,
    *,
    key: str,
    external_key: str | None,
    exclude_id: str | None = None,
) -> None:
    """Raise ``ConflictError`` when a thing key is held by another thing."""
    for column, value in ((Thing.key, key), (Thing.external_key, external_key)):
        if not value:
            continue
        query = select(Thing.id).where(column == value)
        if exclude_id is not None:
            query = query.where(Thing.id != exclude_id)
        if (await session.execute(query)).first() is not None:
            raise ConflictError(f"thing {column.key} already in use")


async def flush_or_conflict(session: AsyncSession, entity: str) -> None:
    """Flush pending rows, mapping constraint violations to a conflict."""
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ConflictError(f"{entity} violates a uniqueness constraint") from exc
