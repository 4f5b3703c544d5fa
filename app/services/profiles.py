"""Profile lifecycle and listing."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.group import Group
from app.models.mixins import new_id, sequential_stamps
from app.models.profile import Profile
from app.paging import Page, PageMetadata, fetch_page
from app.requests.profiles import CreateProfilesReq, UpdateProfileReq
from app.roles import EDITOR, VIEWER
from app.services.access import authorize_group, authorize_org, authorize_profile, visible
from app.services.audit import log_event
from app.services.identity import Caller
from app.services.integrity import ensure_id_available, flush_or_conflict


async def create_profiles(
    session: AsyncSession, caller: Caller, req: CreateProfilesReq
) -> list[Profile]:
    """Create profiles in a group.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    caller : Caller
        Authenticated identity; needs at least editor in the group.
    req : CreateProfilesReq
        Validated request.

    Returns
    -------
    list[Profile]
        Created profiles in request order.
    """
    group = await authorize_group(session, caller, req.group_id, EDITOR)
    profiles = []
    for spec, stamp in zip(req.profiles, sequential_stamps(len(req.profiles))):
        profile_id = spec.id or new_id()
        await ensure_id_available(session, Profile, profile_id, "profile")
        profile = Profile(
            id=profile_id,
            group_id=group.id,
            name=spec.name,
            config=spec.config,
            profile_metadata=spec.metadata,
            created_at=stamp,
        )
        session.add(profile)
        profiles.append(profile)
    await flush_or_conflict(session, "profile")
    await log_event(
        session,
        user_id=caller.id,
        org_id=group.org_id,
        action="profiles_created",
        resource_type="profile",
        resource_id=",".join(profile.id for profile in profiles),
        metadata={"group_id": group.id, "count": len(profiles)},
    )
    return profiles


async def view_profile(session: AsyncSession, caller: Caller, profile_id: str) -> Profile:
    return await authorize_profile(session, caller, profile_id, VIEWER)


async def update_profile(
    session: AsyncSession, caller: Caller, req: UpdateProfileReq
) -> Profile:
    profile = await authorize_profile(session, caller, req.id, EDITOR)
    profile.name = req.name
    profile.config = req.config
    profile.profile_metadata = req.metadata
    await session.flush()
    await log_event(
        session,
        user_id=caller.id,
        action="profile_updated",
        resource_type="profile",
        resource_id=profile.id,
        metadata={"group_id": profile.group_id},
    )
    return profile


async def remove_profiles(
    session: AsyncSession, caller: Caller, profile_ids: tuple[str, ...]
) -> None:
    """Delete profiles and the things created from them."""
    profiles = [
        await authorize_profile(session, caller, profile_id, EDITOR)
        for profile_id in profile_ids
    ]
    for profile in profiles:
        await session.delete(profile)
        await log_event(
            session,
            user_id=caller.id,
            action="profile_removed",
            resource_type="profile",
            resource_id=profile.id,
            metadata={"group_id": profile.group_id},
        )
    await session.flush()


async def list_profiles(
    session: AsyncSession, caller: Caller, page: PageMetadata
) -> Page[Profile]:
    return await fetch_page(session, visible(Profile, caller), Profile, page)


async def list_profiles_by_group(
    session: AsyncSession, caller: Caller, group_id: str, page: PageMetadata
) -> Page[Profile]:
    await authorize_group(session, caller, group_id, VIEWER)
    statement = select(Profile).where(Profile.group_id == group_id)
    return await fetch_page(session, statement, Profile, page)


async def list_profiles_by_org(
    session: AsyncSession, caller: Caller, org_id: str, page: PageMetadata
) -> Page[Profile]:
    await authorize_org(session, caller, org_id, VIEWER)
    statement = select(Profile).where(
        Profile.group_id.in_(select(Group.id).where(Group.org_id == org_id))
    )
    return await fetch_page(session, statement, Profile, page)
