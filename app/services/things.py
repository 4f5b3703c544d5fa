"""Thing lifecycle, listing and device identity."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFoundError
from app.models.group import Group
from app.models.mixins import new_id, sequential_stamps
from app.models.thing import Thing
from app.paging import Page, PageMetadata, fetch_page
from app.requests.things import (
    EXTERNAL_KEY,
    CreateThingsReq,
    ThingKeyReq,
    UpdateExternalKeyReq,
    UpdateThingProfileReq,
    UpdateThingReq,
)
from app.roles import EDITOR, VIEWER
from app.services.access import (
    authorize_group,
    authorize_org,
    authorize_profile,
    authorize_thing,
    visible,
)
from app.services.audit import log_event
from app.services.identity import Caller
from app.services.integrity import (
    ensure_id_available,
    ensure_thing_keys_available,
    flush_or_conflict,
)
from app.services.security import generate_thing_key

logger = logging.getLogger(__name__)


async def create_things(
    session: AsyncSession, caller: Caller, req: CreateThingsReq
) -> list[Thing]:
    """Create things from one profile.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    caller : Caller
        Authenticated identity; needs at least editor in the profile's group.
    req : CreateThingsReq
        Validated request.

    Returns
    -------
    list[Thing]
        Created things in request order. Things without a key get a
        generated one.
    """
    profile = await authorize_profile(session, caller, req.profile_id, EDITOR)
    things = []
    for spec, stamp in zip(req.things, sequential_stamps(len(req.things))):
        thing_id = spec.id or new_id()
        key = spec.key or generate_thing_key()
        await ensure_id_available(session, Thing, thing_id, "thing")
        await ensure_thing_keys_available(
            session, key=key, external_key=spec.external_key
        )
        thing = Thing(
            id=thing_id,
            profile_id=profile.id,
            group_id=profile.group_id,
            name=spec.name,
            key=key,
            external_key=spec.external_key or None,
            thing_metadata=spec.metadata,
            created_at=stamp,
        )
        session.add(thing)
        things.append(thing)
    await flush_or_conflict(session, "thing")
    await log_event(
        session,
        user_id=caller.id,
        action="things_created",
        resource_type="thing",
        resource_id=",".join(thing.id for thing in things),
        metadata={"profile_id": profile.id, "count": len(things)},
    )
    logger.info("Created %d things from profile %s", len(things), profile.id)
    return things


async def view_thing(session: AsyncSession, caller: Caller, thing_id: str) -> Thing:
    return await authorize_thing(session, caller, thing_id, VIEWER)


async def update_thing(session: AsyncSession, caller: Caller, req: UpdateThingReq) -> Thing:
    """Replace a thing's name, key and metadata."""
    thing = await authorize_thing(session, caller, req.id, EDITOR)
    await ensure_thing_keys_available(
        session, key=req.key, external_key=None, exclude_id=thing.id
    )
    thing.name = req.name
    thing.key = req.key
    thing.thing_metadata = req.metadata
    await flush_or_conflict(session, "thing")
    await log_event(
        session,
        user_id=caller.id,
        action="thing_updated",
        resource_type="thing",
        resource_id=thing.id,
        metadata={"name": thing.name},
    )
    return thing


async def update_thing_profile(
    session: AsyncSession, caller: Caller, req: UpdateThingProfileReq
) -> Thing:
    """Move a thing to another profile.

    The target profile must belong to the target group; the caller needs
    editor rights on both the current and the target group.
    """
    thing = await authorize_thing(session, caller, req.id, EDITOR)
    group = await authorize_group(session, caller, req.group_id, EDITOR)
    profile = await authorize_profile(session, caller, req.profile_id, EDITOR)
    if profile.group_id != group.id:
        raise NotFoundError(f"profile {profile.id} not found in group {group.id}")
    previous = thing.profile_id
    thing.profile_id = profile.id
    thing.group_id = group.id
    await session.flush()
    await log_event(
        session,
        user_id=caller.id,
        org_id=group.org_id,
        action="thing_profile_updated",
        resource_type="thing",
        resource_id=thing.id,
        metadata={"from": previous, "to": profile.id},
    )
    return thing


async def update_external_key(
    session: AsyncSession, caller: Caller, req: UpdateExternalKeyReq
) -> Thing:
    thing = await authorize_thing(session, caller, req.id, EDITOR)
    await ensure_thing_keys_available(
        session, key="", external_key=req.key, exclude_id=thing.id
    )
    thing.external_key = req.key
    await flush_or_conflict(session, "thing")
    await log_event(
        session,
        user_id=caller.id,
        action="thing_external_key_updated",
        resource_type="thing",
        resource_id=thing.id,
        metadata={},
    )
    return thing


async def remove_things(
    session: AsyncSession, caller: Caller, thing_ids: tuple[str, ...]
) -> None:
    things = [
        await authorize_thing(session, caller, thing_id, EDITOR) for thing_id in thing_ids
    ]
    for thing in things:
        await session.delete(thing)
        await log_event(
            session,
            user_id=caller.id,
            action="thing_removed",
            resource_type="thing",
            resource_id=thing.id,
            metadata={"profile_id": thing.profile_id},
        )
    await session.flush()


async def list_things(
    session: AsyncSession, caller: Caller, page: PageMetadata
) -> Page[Thing]:
    """List every thing visible to the caller."""
    return await fetch_page(session, visible(Thing, caller), Thing, page)


async def list_things_by_group(
    session: AsyncSession, caller: Caller, group_id: str, page: PageMetadata
) -> Page[Thing]:
    await authorize_group(session, caller, group_id, VIEWER)
    statement = select(Thing).where(Thing.group_id == group_id)
    return await fetch_page(session, statement, Thing, page)


async def list_things_by_profile(
    session: AsyncSession, caller: Caller, profile_id: str, page: PageMetadata
) -> Page[Thing]:
    await authorize_profile(session, caller, profile_id, VIEWER)
    statement = select(Thing).where(Thing.profile_id == profile_id)
    return await fetch_page(session, statement, Thing, page)


async def list_things_by_org(
    session: AsyncSession, caller: Caller, org_id: str, page: PageMetadata
) -> Page[Thing]:
    await authorize_org(session, caller, org_id, VIEWER)
    statement = select(Thing).where(
        Thing.group_id.in_(select(Group.id).where(Group.org_id == org_id))
    )
    return await fetch_page(session, statement, Thing, page)


async def identify_thing(session: AsyncSession, req: ThingKeyReq) -> Thing:
    """Resolve a device key to its thing.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    req : ThingKeyReq
        Validated key and key type.

    Returns
    -------
    Thing
        Matching thing.
    """
    column = Thing.external_key if req.key_type == EXTERNAL_KEY else Thing.key
    thing = await session.scalar(select(Thing).where(column == req.value))
    if thing is None:
        raise NotFoundError("thing not found")
    return thing
