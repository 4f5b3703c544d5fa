"""Group membership schemas."""

from pydantic import BaseModel, Field

from app.schemas.common import APIModel, PageResponse


class MembershipRecord(APIModel):
    """Membership as exported and restored."""

    group_id: str = ""
    member_id: str = ""
    email: str = ""
    role: str = ""


class MembershipEntry(BaseModel):
    """One member to add or update; ``email`` is informational."""

    member_id: str = ""
    email: str = ""
    role: str = ""


class GroupMembershipsBody(BaseModel):
    group_memberships: list[MembershipEntry] = Field(default_factory=list)


class RemoveMembershipsBody(BaseModel):
    member_ids: list[str] = Field(default_factory=list)


class MembershipView(APIModel):
    member_id: str
    email: str
    role: str


class MembershipsPageResponse(PageResponse):
    email: str | None = None
    group_memberships: list[MembershipView]
