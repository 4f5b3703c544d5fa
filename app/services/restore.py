"""Reconstruction of the entity graph from a backup document.

Collections are applied in dependency order: groups, profiles, things, then
memberships. Each collection is flushed before the next one so parents
restored in the same document are visible to their dependents. Nothing is
committed here; the route commits once the whole document applied, which
makes a restore all-or-nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError, ForbiddenError, NotFoundError
from app.models.group import Group, GroupMembership
from app.models.mixins import new_id, sequential_stamps
from app.models.organization import Organization
from app.models.profile import Profile
from app.models.thing import Thing
from app.projection import as_utc
from app.requests.backup import GROUP_MEMBERSHIPS, GROUPS, PROFILES, THINGS
from app.roles import ADMIN
from app.schemas.backup import BackupDocument
from app.services.access import authorize_group, authorize_org
from app.services.audit import log_event
from app.services.identity import Caller, require_platform_admin
from app.services.integrity import (
    ensure_id_available,
    ensure_thing_keys_available,
    flush_or_conflict,
)
from app.services.security import generate_thing_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RestoreScope:
    """Bound on where restored entities may land.

    Attributes
    ----------
    org_id : str
        Restored entities must belong to this organization when set.
    group_id : str
        Restored entities must belong to this group when set; records
        without a group id are placed in it.
    """

    org_id: str = ""
    group_id: str = ""

    def admits_group(self, group: Group) -> bool:
        if self.group_id and group.id != self.group_id:
            return False
        if self.org_id and group.org_id != self.org_id:
            return False
        return True


async def _scoped_group(session: AsyncSession, scope: RestoreScope, group_id: str) -> Group:
    group = await session.get(Group, group_id)
    if group is None:
        raise NotFoundError(f"group {group_id} not found")
    if not scope.admits_group(group):
        raise ForbiddenError(f"group {group_id} is outside the restore scope")
    return group


async def _restore_groups(
    session: AsyncSession, caller: Caller, document: BackupDocument, scope: RestoreScope
) -> None:
    for record, stamp in zip(document.groups, sequential_stamps(len(document.groups))):
        if scope.org_id and record.org_id != scope.org_id:
            raise ForbiddenError(f"org {record.org_id} is outside the restore scope")
        if await session.get(Organization, record.org_id) is None:
            raise NotFoundError(f"org {record.org_id} not found")
        group_id = record.id or new_id()
        await ensure_id_available(session, Group, group_id, "group")
        created_at = as_utc(record.created_at) or stamp
        session.add(
            Group(
                id=group_id,
                org_id=record.org_id,
                owner_id=record.owner_id or caller.id,
                name=record.name,
                description=record.description,
                group_metadata=record.metadata,
                created_at=created_at,
                updated_at=as_utc(record.updated_at) or created_at,
            )
        )
    await flush_or_conflict(session, "group")


async def _restore_profiles(
    session: AsyncSession, document: BackupDocument, scope: RestoreScope
) -> None:
    stamps = sequential_stamps(len(document.profiles))
    for record, stamp in zip(document.profiles, stamps):
        group = await _scoped_group(session, scope, record.group_id or scope.group_id)
        profile_id = record.id or new_id()
        await ensure_id_available(session, Profile, profile_id, "profile")
        session.add(
            Profile(
                id=profile_id,
                group_id=group.id,
                name=record.name,
                config=record.config,
                profile_metadata=record.metadata,
                created_at=stamp,
            )
        )
    await flush_or_conflict(session, "profile")


async def _restore_things(
    session: AsyncSession, document: BackupDocument, scope: RestoreScope
) -> None:
    for record, stamp in zip(document.things, sequential_stamps(len(document.things))):
        profile = await session.get(Profile, record.profile_id)
        if profile is None:
            raise NotFoundError(f"profile {record.profile_id} not found")
        group = await _scoped_group(session, scope, profile.group_id)
        thing_id = record.id or new_id()
        key = record.key or generate_thing_key()
        await ensure_id_available(session, Thing, thing_id, "thing")
        await ensure_thing_keys_available(
            session, key=key, external_key=record.external_key
        )
        session.add(
            Thing(
                id=thing_id,
                profile_id=profile.id,
                group_id=group.id,
                name=record.name,
                key=key,
                external_key=record.external_key or None,
                thing_metadata=record.metadata,
                created_at=stamp,
            )
        )
        # Flushed per row so a repeated key inside the document is caught
        # by the lookup above instead of by the unique index.
        await flush_or_conflict(session, "thing")


async def _restore_memberships(
    session: AsyncSession, document: BackupDocument, scope: RestoreScope
) -> None:
    records = document.group_memberships
    for record, stamp in zip(records, sequential_stamps(len(records))):
        group = await _scoped_group(session, scope, record.group_id or scope.group_id)
        if record.member_id == group.owner_id:
            raise ConflictError(f"user {record.member_id} already owns group {group.id}")
        if await session.get(GroupMembership, (group.id, record.member_id)) is not None:
            raise ConflictError(
                f"membership for {record.member_id} in group {group.id} already exists"
            )
        session.add(
            GroupMembership(
                group_id=group.id,
                member_id=record.member_id,
                email=record.email,
                role=record.role,
                created_at=stamp,
            )
        )
        await flush_or_conflict(session, "group membership")


async def apply_document(
    session: AsyncSession,
    caller: Caller,
    document: BackupDocument,
    *,
    scope: RestoreScope,
    collections: tuple[str, ...],
) -> None:
    """Restore the selected collections of a document.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    caller : Caller
        Authenticated identity; already authorized for ``scope``.
    document : BackupDocument
        Decoded and validated document.
    scope : RestoreScope
        Where restored entities may land.
    collections : tuple[str, ...]
        Collections of the document to apply.

    Returns
    -------
    None
        Adds rows to the session without committing.
    """
    if GROUPS in collections:
        await _restore_groups(session, caller, document, scope)
    if PROFILES in collections:
        await _restore_profiles(session, document, scope)
    if THINGS in collections:
        await _restore_things(session, document, scope)
    if GROUP_MEMBERSHIPS in collections:
        await _restore_memberships(session, document, scope)

    counts = {name: len(getattr(document, name)) for name in collections}
    if scope.group_id:
        resource_type, resource_id = "group", scope.group_id
    elif scope.org_id:
        resource_type, resource_id = "org", scope.org_id
    else:
        resource_type, resource_id = "platform", "*"
    await log_event(
        session,
        user_id=caller.id,
        org_id=scope.org_id or None,
        action="backup_restored",
        resource_type=resource_type,
        resource_id=resource_id,
        metadata=counts,
    )
    logger.info("Restored %s", counts)


async def restore_platform(
    session: AsyncSession, caller: Caller, document: BackupDocument
) -> None:
    require_platform_admin(caller)
    await apply_document(
        session,
        caller,
        document,
        scope=RestoreScope(),
        collections=(GROUPS, PROFILES, THINGS, GROUP_MEMBERSHIPS),
    )


async def restore_by_group(
    session: AsyncSession,
    caller: Caller,
    group_id: str,
    document: BackupDocument,
    collection: str,
) -> None:
    """Restore one collection into a group."""
    group = await authorize_group(session, caller, group_id, ADMIN)
    await apply_document(
        session,
        caller,
        document,
        scope=RestoreScope(org_id=group.org_id, group_id=group.id),
        collections=(collection,),
    )


async def restore_by_org(
    session: AsyncSession,
    caller: Caller,
    org_id: str,
    document: BackupDocument,
    collection: str,
) -> None:
    """Restore one collection into an organization's groups."""
    org = await authorize_org(session, caller, org_id, ADMIN)
    await apply_document(
        session,
        caller,
        document,
        scope=RestoreScope(org_id=org.id),
        collections=(collection,),
    )
