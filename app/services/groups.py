"""Group lifecycle and listing."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.group import Group
from app.models.mixins import new_id, sequential_stamps, utc_now
from app.paging import Page, PageMetadata, fetch_page
from app.requests.groups import CreateGroupsReq, UpdateGroupReq
from app.roles import ADMIN, EDITOR, VIEWER
from app.services.access import authorize_group, authorize_org, visible
from app.services.audit import log_event
from app.services.identity import Caller
from app.services.integrity import ensure_id_available, flush_or_conflict

logger = logging.getLogger(__name__)


async def create_groups(
    session: AsyncSession, caller: Caller, req: CreateGroupsReq
) -> list[Group]:
    """Create groups in an organization; the caller becomes their owner.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    caller : Caller
        Authenticated identity; needs at least editor in the organization.
    req : CreateGroupsReq
        Validated request.

    Returns
    -------
    list[Group]
        Created groups in request order.
    """
    await authorize_org(session, caller, req.org_id, EDITOR)
    groups = []
    for spec, stamp in zip(req.groups, sequential_stamps(len(req.groups))):
        group_id = spec.id or new_id()
        await ensure_id_available(session, Group, group_id, "group")
        group = Group(
            id=group_id,
            org_id=req.org_id,
            owner_id=caller.id,
            name=spec.name,
            description=spec.description,
            group_metadata=spec.metadata,
            created_at=stamp,
            updated_at=stamp,
        )
        session.add(group)
        groups.append(group)
    await flush_or_conflict(session, "group")
    await log_event(
        session,
        user_id=caller.id,
        org_id=req.org_id,
        action="groups_created",
        resource_type="group",
        resource_id=",".join(group.id for group in groups),
        metadata={"count": len(groups)},
    )
    logger.info("Created %d groups in org %s", len(groups), req.org_id)
    return groups


async def view_group(session: AsyncSession, caller: Caller, group_id: str) -> Group:
    return await authorize_group(session, caller, group_id, VIEWER)


async def update_group(
    session: AsyncSession, caller: Caller, req: UpdateGroupReq
) -> Group:
    """Replace a group's name, description and metadata."""
    group = await authorize_group(session, caller, req.id, ADMIN)
    group.name = req.name
    group.description = req.description
    group.group_metadata = req.metadata
    group.updated_at = utc_now()
    await session.flush()
    await log_event(
        session,
        user_id=caller.id,
        org_id=group.org_id,
        action="group_updated",
        resource_type="group",
        resource_id=group.id,
        metadata={"name": group.name},
    )
    return group


async def remove_groups(
    session: AsyncSession, caller: Caller, group_ids: tuple[str, ...]
) -> None:
    """Delete groups together with their profiles, things and memberships.

    Every group is authorized before anything is deleted, so one missing or
    forbidden id leaves all of them in place.
    """
    groups = [
        await authorize_group(session, caller, group_id, ADMIN) for group_id in group_ids
    ]
    for group in groups:
        await session.delete(group)
        await log_event(
            session,
            user_id=caller.id,
            org_id=group.org_id,
            action="group_removed",
            resource_type="group",
            resource_id=group.id,
            metadata={},
        )
    await session.flush()


async def list_groups(
    session: AsyncSession, caller: Caller, page: PageMetadata
) -> Page[Group]:
    return await fetch_page(session, visible(Group, caller), Group, page)


async def list_groups_by_org(
    session: AsyncSession, caller: Caller, org_id: str, page: PageMetadata
) -> Page[Group]:
    """List the groups of one organization."""
    await authorize_org(session, caller, org_id, VIEWER)
    statement = select(Group).where(Group.org_id == org_id)
    return await fetch_page(session, statement, Group, page)
