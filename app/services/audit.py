"""Audit logging service."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuditLog


async def log_event(
    session: AsyncSession,
    *,
    user_id: str,
    action: str,
    resource_type: str,
    resource_id: str,
    metadata: dict[str, Any],
    org_id: str | None = None,
) -> AuditLog:
    """Persist an audit event in the caller's transaction.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    user_id : str
        Identifier of the acting user.
    action : str
        Event action.
    resource_type : str
        Kind of resource touched.
    resource_id : str
        String resource identifier.
    metadata : dict[str, Any]
        Additional event metadata.
    org_id : str | None, default=None
        Organization the resource belongs to, when known.

    Returns
    -------
    AuditLog
        Pending audit record.
    """
    event = AuditLog(
        org_id=org_id,
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        event_metadata=metadata,
    )
    session.add(event)
    return event
