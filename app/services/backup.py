"""Read-only snapshots of the entity graph."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.group import Group, GroupMembership
from app.models.profile import Profile
from app.models.thing import Thing
from app.projection import view_group, view_membership, view_profile, view_thing
from app.roles import ADMIN
from app.schemas.backup import BackupDocument
from app.services.access import authorize_group, authorize_org
from app.services.identity import Caller, require_platform_admin
from app.services.memberships import persisted_memberships


async def _rows(session: AsyncSession, model: Any, *criteria: Any) -> list[Any]:
    statement = select(model).where(*criteria)
    if model is GroupMembership:
        statement = statement.order_by(model.created_at, model.member_id)
    else:
        statement = statement.order_by(model.created_at, model.id)
    return list((await session.execute(statement)).scalars().all())


def _org_groups(org_id: str) -> Any:
    return select(Group.id).where(Group.org_id == org_id)


async def backup_platform(session: AsyncSession, caller: Caller) -> BackupDocument:
    """Export every group, profile, thing and membership.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    caller : Caller
        Authenticated identity; must be a platform administrator.

    Returns
    -------
    BackupDocument
        Document with all four collections filled.
    """
    require_platform_admin(caller)
    return BackupDocument(
        groups=[view_group(row) for row in await _rows(session, Group)],
        profiles=[view_profile(row) for row in await _rows(session, Profile)],
        things=[view_thing(row) for row in await _rows(session, Thing)],
        group_memberships=[
            view_membership(row) for row in await _rows(session, GroupMembership)
        ],
    )


async def backup_things_by_group(
    session: AsyncSession, caller: Caller, group_id: str
) -> BackupDocument:
    group = await authorize_group(session, caller, group_id, ADMIN)
    rows = await _rows(session, Thing, Thing.group_id == group.id)
    return BackupDocument(things=[view_thing(row) for row in rows])


async def backup_things_by_org(
    session: AsyncSession, caller: Caller, org_id: str
) -> BackupDocument:
    org = await authorize_org(session, caller, org_id, ADMIN)
    rows = await _rows(session, Thing, Thing.group_id.in_(_org_groups(org.id)))
    return BackupDocument(things=[view_thing(row) for row in rows])


async def backup_profiles_by_group(
    session: AsyncSession, caller: Caller, group_id: str
) -> BackupDocument:
    group = await authorize_group(session, caller, group_id, ADMIN)
    rows = await _rows(session, Profile, Profile.group_id == group.id)
    return BackupDocument(profiles=[view_profile(row) for row in rows])


async def backup_profiles_by_org(
    session: AsyncSession, caller: Caller, org_id: str
) -> BackupDocument:
    org = await authorize_org(session, caller, org_id, ADMIN)
    rows = await _rows(session, Profile, Profile.group_id.in_(_org_groups(org.id)))
    return BackupDocument(profiles=[view_profile(row) for row in rows])


async def backup_memberships_by_group(
    session: AsyncSession, caller: Caller, group_id: str
) -> BackupDocument:
    """Export the persisted memberships of a group.

    The synthesized owner entry is left out; restoring the group restores
    its owner.
    """
    group = await authorize_group(session, caller, group_id, ADMIN)
    rows = await persisted_memberships(session, group.id)
    return BackupDocument(group_memberships=[view_membership(row) for row in rows])
