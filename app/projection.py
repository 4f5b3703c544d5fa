"""Projection of stored rows into wire records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from app.models.group import Group, GroupMembership
from app.models.profile import Profile
from app.models.thing import Thing
from app.paging import PageMetadata
from app.schemas.groups import GroupRecord
from app.schemas.memberships import MembershipRecord
from app.schemas.profiles import ProfileRecord
from app.schemas.things import ThingRecord


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize a timestamp to UTC.

    SQLite returns naive values; they are stored in UTC already.

    Parameters
    ----------
    value : datetime | None
        Stored timestamp.

    Returns
    -------
    datetime | None
        Timezone-aware timestamp.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def view_group(group: Group) -> GroupRecord:
    return GroupRecord(
        id=group.id,
        name=group.name,
        org_id=group.org_id,
        owner_id=group.owner_id,
        description=group.description,
        metadata=group.group_metadata or {},
        created_at=as_utc(group.created_at),
        updated_at=as_utc(group.updated_at),
    )


def view_profile(profile: Profile) -> ProfileRecord:
    return ProfileRecord(
        id=profile.id,
        group_id=profile.group_id,
        name=profile.name,
        config=profile.config or {},
        metadata=profile.profile_metadata or {},
    )


def view_thing(thing: Thing) -> ThingRecord:
    return ThingRecord(
        id=thing.id,
        group_id=thing.group_id,
        profile_id=thing.profile_id,
        name=thing.name,
        key=thing.key,
        external_key=thing.external_key,
        metadata=thing.thing_metadata or {},
    )


def view_membership(membership: GroupMembership) -> MembershipRecord:
    return MembershipRecord(
        group_id=membership.group_id,
        member_id=membership.member_id,
        email=membership.email,
        role=membership.role,
    )


def page_fields(page: PageMetadata, total: int) -> dict[str, Any]:
    """Return the metadata echoed next to a listing page.

    Empty optional parameters are left out so they disappear from the JSON
    response.
    """
    return {
        "total": total,
        "offset": page.offset,
        "limit": page.limit,
        "order": page.order or None,
        "direction": page.direction or None,
        "name": page.name or None,
    }
