"""Group membership request descriptors."""

from __future__ import annotations

from dataclasses import dataclass

from app.errors import MissingIDError
from app.paging import MEMBERSHIP_ORDERS, PageMetadata, validate_page_metadata
from app.requests.common import require_id, require_items, require_token
from app.roles import validate_assignable_role
from app.schemas.memberships import MembershipEntry

MAX_MEMBERSHIP_LIMIT = 100


@dataclass(frozen=True, slots=True)
class GroupMembershipsReq:
    """Create or update memberships of one group."""

    token: str
    group_id: str
    memberships: tuple[MembershipEntry, ...]

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.group_id, "group")
        require_items(self.memberships)
        for membership in self.memberships:
            if not membership.member_id:
                raise MissingIDError("member")
            validate_assignable_role(membership.role)


@dataclass(frozen=True, slots=True)
class RemoveMembershipsReq:
    token: str
    group_id: str
    member_ids: tuple[str, ...]

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.group_id, "group")
        require_items(self.member_ids)
        for member_id in self.member_ids:
            require_id(member_id, "member")


@dataclass(frozen=True, slots=True)
class ListMembershipsReq:
    token: str
    group_id: str
    page: PageMetadata

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.group_id, "group")
        validate_page_metadata(
            self.page, max_limit=MAX_MEMBERSHIP_LIMIT, orders=MEMBERSHIP_ORDERS
        )
