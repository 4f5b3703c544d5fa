"""Group memberships and the owner read model.

The group owner is never stored as a membership row. Listings combine the
persisted rows with the group's ``owner_id`` through ``merge_owner`` so the
owner appears as a regular ``owner`` entry.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError, ForbiddenError, NotFoundError
from app.models.group import Group, GroupMembership
from app.models.mixins import sequential_stamps
from app.models.user import User
from app.paging import DESC_DIR, EMAIL_ORDER, ID_ORDER, Page, PageMetadata
from app.roles import ADMIN, OWNER, VIEWER
from app.schemas.memberships import MembershipEntry, MembershipView
from app.services.access import authorize_group
from app.services.audit import log_event
from app.services.identity import Caller


def merge_owner(
    owner: MembershipView, memberships: list[MembershipView]
) -> list[MembershipView]:
    """Return the owner entry followed by the persisted memberships.

    Parameters
    ----------
    owner : MembershipView
        Entry synthesized from the group's owner.
    memberships : list[MembershipView]
        Persisted memberships in creation order.

    Returns
    -------
    list[MembershipView]
        Unified read model; a stray persisted row for the owner is dropped.
    """
    return [owner] + [
        membership for membership in memberships if membership.member_id != owner.member_id
    ]


def page_memberships(
    memberships: list[MembershipView], page: PageMetadata
) -> Page[MembershipView]:
    """Filter, order and slice an in-memory membership list.

    Parameters
    ----------
    memberships : list[MembershipView]
        Merged memberships in default order.
    page : PageMetadata
        Email filter, order and page bounds.

    Returns
    -------
    Page[MembershipView]
        Requested slice and total matching count.
    """
    items = [m for m in memberships if not page.email or m.email == page.email]
    if page.order == EMAIL_ORDER:
        items.sort(key=lambda m: (m.email, m.member_id))
    elif page.order == ID_ORDER:
        items.sort(key=lambda m: m.member_id)
    if page.direction == DESC_DIR:
        items.reverse()
    return Page(
        total=len(items), items=items[page.offset : page.offset + page.limit]
    )


async def _owner_view(session: AsyncSession, group: Group) -> MembershipView:
    owner = await session.get(User, group.owner_id)
    return MembershipView(
        member_id=group.owner_id,
        email=owner.email if owner is not None else "",
        role=OWNER,
    )


async def list_memberships(
    session: AsyncSession, caller: Caller, group_id: str, page: PageMetadata
) -> Page[MembershipView]:
    """List a group's memberships including the synthesized owner."""
    group = await authorize_group(session, caller, group_id, VIEWER)
    persisted = [
        MembershipView.model_validate(row)
        for row in await persisted_memberships(session, group.id)
    ]
    merged = merge_owner(await _owner_view(session, group), persisted)
    return page_memberships(merged, page)


async def persisted_memberships(
    session: AsyncSession, group_id: str
) -> list[GroupMembership]:
    """Return the stored memberships of a group in creation order."""
    result = await session.execute(
        select(GroupMembership)
        .where(GroupMembership.group_id == group_id)
        .order_by(GroupMembership.created_at, GroupMembership.member_id)
    )
    return list(result.scalars().all())


async def create_memberships(
    session: AsyncSession,
    caller: Caller,
    group_id: str,
    entries: tuple[MembershipEntry, ...],
) -> list[GroupMembership]:
    """Grant roles in a group.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    caller : Caller
        Authenticated identity; needs at least admin in the group.
    group_id : str
        Group identifier.
    entries : tuple[MembershipEntry, ...]
        Members and roles; roles were validated as assignable.

    Returns
    -------
    list[GroupMembership]
        Created memberships. Emails are copied from the user records.
    """
    group = await authorize_group(session, caller, group_id, ADMIN)
    created = []
    for entry, stamp in zip(entries, sequential_stamps(len(entries))):
        user = await session.get(User, entry.member_id)
        if user is None:
            raise NotFoundError(f"user {entry.member_id} not found")
        if entry.member_id == group.owner_id:
            raise ConflictError(f"user {entry.member_id} already owns the group")
        if await session.get(GroupMembership, (group.id, entry.member_id)) is not None:
            raise ConflictError(f"membership for {entry.member_id} already exists")
        membership = GroupMembership(
            group_id=group.id,
            member_id=user.id,
            email=user.email,
            role=entry.role,
            created_at=stamp,
        )
        session.add(membership)
        await session.flush()
        created.append(membership)
    await log_event(
        session,
        user_id=caller.id,
        org_id=group.org_id,
        action="group_memberships_created",
        resource_type="group",
        resource_id=group.id,
        metadata={"count": len(created)},
    )
    return created


async def _load_membership(
    session: AsyncSession, group: Group, member_id: str
) -> GroupMembership:
    if member_id == group.owner_id:
        raise ForbiddenError("the group owner membership cannot be changed")
    membership = await session.get(GroupMembership, (group.id, member_id))
    if membership is None:
        raise NotFoundError(f"membership for {member_id} not found")
    return membership


async def update_memberships(
    session: AsyncSession,
    caller: Caller,
    group_id: str,
    entries: tuple[MembershipEntry, ...],
) -> None:
    """Change the roles of existing members."""
    group = await authorize_group(session, caller, group_id, ADMIN)
    for entry in entries:
        membership = await _load_membership(session, group, entry.member_id)
        membership.role = entry.role
    await session.flush()
    await log_event(
        session,
        user_id=caller.id,
        org_id=group.org_id,
        action="group_memberships_updated",
        resource_type="group",
        resource_id=group.id,
        metadata={"count": len(entries)},
    )


async def remove_memberships(
    session: AsyncSession,
    caller: Caller,
    group_id: str,
    member_ids: tuple[str, ...],
) -> None:
    group = await authorize_group(session, caller, group_id, ADMIN)
    memberships = [
        await _load_membership(session, group, member_id) for member_id in member_ids
    ]
    for membership in memberships:
        await session.delete(membership)
    await session.flush()
    await log_event(
        session,
        user_id=caller.id,
        org_id=group.org_id,
        action="group_memberships_removed",
        resource_type="group",
        resource_id=group.id,
        metadata={"count": len(memberships)},
    )
