"""Role resolution and authorization checks for scoped resources.

Existence is always checked before privileges, so a caller without access to
an existing resource sees ``403`` while a missing resource is ``404`` for
everyone.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ForbiddenError, NotFoundError
from app.models.group import Group, GroupMembership
from app.models.organization import Organization, OrgMember
from app.models.profile import Profile
from app.models.thing import Thing
from app.roles import OWNER, highest_role, role_satisfies
from app.services.identity import Caller


async def org_role(session: AsyncSession, caller: Caller, org: Organization) -> str | None:
    """Return the caller's effective role in an organization.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    caller : Caller
        Authenticated identity.
    org : Organization
        Organization row.

    Returns
    -------
    str | None
        Effective role, or ``None`` when the caller has no relation to it.
    """
    if caller.is_admin or org.owner_id == caller.id:
        return OWNER
    member = await session.get(OrgMember, (org.id, caller.id))
    return member.role if member is not None else None


async def group_role(session: AsyncSession, caller: Caller, group: Group) -> str | None:
    """Return the caller's effective role in a group.

    The organization role, the implicit creator role and any explicit group
    membership are combined; the highest one wins.
    """
    if caller.is_admin or group.owner_id == caller.id:
        return OWNER
    org = await session.get(Organization, group.org_id)
    inherited = await org_role(session, caller, org) if org is not None else None
    membership = await session.get(GroupMembership, (group.id, caller.id))
    return highest_role(inherited, membership.role if membership is not None else None)


def _require(role: str | None, required: str) -> None:
    if not role_satisfies(role, required):
        raise ForbiddenError()


async def authorize_org(
    session: AsyncSession, caller: Caller, org_id: str, required: str
) -> Organization:
    """Load an organization and check the caller holds ``required`` in it."""
    org = await session.get(Organization, org_id)
    if org is None:
        raise NotFoundError("org not found")
    _require(await org_role(session, caller, org), required)
    return org


async def authorize_group(
    session: AsyncSession, caller: Caller, group_id: str, required: str
) -> Group:
    """Load a group and check the caller holds ``required`` in it.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    caller : Caller
        Authenticated identity.
    group_id : str
        Group identifier.
    required : str
        Minimum role.

    Returns
    -------
    Group
        Loaded group.
    """
    group = await session.get(Group, group_id)
    if group is None:
        raise NotFoundError("group not found")
    _require(await group_role(session, caller, group), required)
    return group


async def authorize_profile(
    session: AsyncSession, caller: Caller, profile_id: str, required: str
) -> Profile:
    """Load a profile and check the caller's role in its group."""
    profile = await session.get(Profile, profile_id)
    if profile is None:
        raise NotFoundError("profile not found")
    await authorize_group(session, caller, profile.group_id, required)
    return profile


async def authorize_thing(
    session: AsyncSession, caller: Caller, thing_id: str, required: str
) -> Thing:
    """Load a thing and check the caller's role in its group."""
    thing = await session.get(Thing, thing_id)
    if thing is None:
        raise NotFoundError("thing not found")
    await authorize_group(session, caller, thing.group_id, required)
    return thing


def visible_group_ids(caller: Caller) -> Select[Any]:
    """Return a statement selecting the ids of groups the caller may list.

    Those are groups of organizations the caller owns or belongs to, groups
    the caller created and groups where the caller holds a membership.
    """
    owned_orgs = select(Organization.id).where(Organization.owner_id == caller.id)
    member_orgs = select(OrgMember.org_id).where(OrgMember.member_id == caller.id)
    member_groups = select(GroupMembership.group_id).where(
        GroupMembership.member_id == caller.id
    )
    return select(Group.id).where(
        or_(
            Group.org_id.in_(owned_orgs),
            Group.org_id.in_(member_orgs),
            Group.owner_id == caller.id,
            Group.id.in_(member_groups),
        )
    )


def visible(model: Any, caller: Caller) -> Select[Any]:
    """Select the rows of ``model`` visible to the caller.

    Parameters
    ----------
    model : Any
        ``Group``, ``Profile`` or ``Thing``.
    caller : Caller
        Authenticated identity.

    Returns
    -------
    Select
        Unordered, unpaged statement.
    """
    statement = select(model)
    if caller.is_admin:
        return statement
    column = model.id if model is Group else model.group_id
    return statement.where(column.in_(visible_group_ids(caller)))
