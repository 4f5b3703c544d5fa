"""Backup and restore request descriptors."""

from __future__ import annotations

from dataclasses import dataclass

from app.errors import EmptyListError, MissingIDError
from app.requests.common import (
    require_id,
    require_token,
    validate_name,
    validate_optional_uuid,
)
from app.roles import validate_assignable_role
from app.schemas.backup import BackupDocument

GROUPS = "groups"
PROFILES = "profiles"
THINGS = "things"
GROUP_MEMBERSHIPS = "group_memberships"


@dataclass(frozen=True, slots=True)
class BackupReq:
    """Whole-platform export."""

    token: str

    def validate(self) -> None:
        require_token(self.token)


@dataclass(frozen=True, slots=True)
class BackupByScopeReq:
    """Export of one collection bounded by a group or organization."""

    token: str
    scope: str
    scope_id: str

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.scope_id, self.scope)


@dataclass(frozen=True, slots=True)
class RestoreReq:
    """Import of a backup document.

    ``collections`` names the collections the endpoint restores; at least
    one of them must be non-empty. Scoped restores pass the scope so that
    records may omit the parent identifier the path already supplies.
    """

    token: str
    document: BackupDocument
    collections: tuple[str, ...] = (GROUPS, PROFILES, THINGS, GROUP_MEMBERSHIPS)
    scope: str = ""
    scope_id: str = ""

    def validate(self) -> None:
        require_token(self.token)
        if self.scope:
            require_id(self.scope_id, self.scope)
        if not any(getattr(self.document, name) for name in self.collections):
            raise EmptyListError()

        document = self.document
        if GROUPS in self.collections:
            for group in document.groups:
                validate_optional_uuid(group.id)
                require_id(group.org_id, "org")
                validate_name(group.name)
        if PROFILES in self.collections:
            for profile in document.profiles:
                validate_optional_uuid(profile.id)
                if not profile.group_id and self.scope != "group":
                    raise MissingIDError("group")
                validate_name(profile.name, required=False)
        if THINGS in self.collections:
            for thing in document.things:
                validate_optional_uuid(thing.id)
                require_id(thing.profile_id, "profile")
                validate_name(thing.name, required=False)
        if GROUP_MEMBERSHIPS in self.collections:
            for membership in document.group_memberships:
                if not membership.member_id:
                    raise MissingIDError("member")
                if not membership.group_id and self.scope != "group":
                    raise MissingIDError("group")
                validate_assignable_role(membership.role)
