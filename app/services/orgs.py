"""Organization provisioning."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError, NotFoundError
from app.models.organization import Organization, OrgMember
from app.models.user import User
from app.roles import ADMIN
from app.schemas.identity import OrgMemberEntry
from app.services.access import authorize_org
from app.services.audit import log_event
from app.services.identity import Caller


async def create_org(session: AsyncSession, caller: Caller, *, name: str) -> Organization:
    """Create an organization owned by the caller."""
    org = Organization(name=name, owner_id=caller.id)
    session.add(org)
    await session.flush()
    await log_event(
        session,
        user_id=caller.id,
        org_id=org.id,
        action="org_created",
        resource_type="org",
        resource_id=org.id,
        metadata={"name": name},
    )
    return org


async def add_org_members(
    session: AsyncSession,
    caller: Caller,
    *,
    org_id: str,
    members: list[OrgMemberEntry],
) -> None:
    """Add members to an organization.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    caller : Caller
        Authenticated identity; must administer the organization.
    org_id : str
        Organization identifier.
    members : list[OrgMemberEntry]
        Members and their roles.

    Returns
    -------
    None
        Adds membership rows.
    """
    org = await authorize_org(session, caller, org_id, ADMIN)
    for entry in members:
        if await session.get(User, entry.member_id) is None:
            raise NotFoundError(f"user {entry.member_id} not found")
        existing = await session.get(OrgMember, (org_id, entry.member_id))
        if entry.member_id == org.owner_id or existing is not None:
            raise ConflictError(f"user {entry.member_id} is already an org member")
        session.add(OrgMember(org_id=org_id, member_id=entry.member_id, role=entry.role))
        await session.flush()
    await log_event(
        session,
        user_id=caller.id,
        org_id=org_id,
        action="org_members_added",
        resource_type="org",
        resource_id=org_id,
        metadata={"count": len(members)},
    )
