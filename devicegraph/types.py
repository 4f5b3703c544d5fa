"""SDK response types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ThingInfo:
    """Thing record.

    Attributes
    ----------
    id : str
        Thing identifier.
    name : str
        Thing name.
    group_id : str
        Owning group.
    profile_id : str
        Profile the thing was created from.
    key : str
        Primary device key.
    external_key : str | None
        Optional secondary key.
    metadata : dict[str, Any]
        Free-form metadata.
    """

    id: str
    name: str
    group_id: str
    profile_id: str
    key: str
    external_key: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ThingsPage:
    """One page of things and the full matching count."""

    total: int
    offset: int
    limit: int
    things: list[ThingInfo]


@dataclass(frozen=True, slots=True)
class MembershipInfo:
    member_id: str
    email: str
    role: str


@dataclass(frozen=True, slots=True)
class MembershipsPage:
    """One page of group memberships, the owner included."""

    total: int
    offset: int
    limit: int
    group_memberships: list[MembershipInfo]
