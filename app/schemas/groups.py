"""Group schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.schemas.common import APIModel, PageResponse


class GroupRecord(APIModel):
    """Group as listed, exported and restored."""

    id: str = ""
    name: str = ""
    org_id: str = ""
    owner_id: str = ""
    description: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class GroupCreate(BaseModel):
    """One group to create."""

    id: str = ""
    name: str = ""
    description: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class CreateGroupsBody(BaseModel):
    groups: list[GroupCreate] = Field(default_factory=list)


class GroupUpdate(BaseModel):
    name: str = ""
    description: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class RemoveGroupsBody(BaseModel):
    group_ids: list[str] = Field(default_factory=list)


class GroupsResponse(APIModel):
    groups: list[GroupRecord]


class GroupsPageResponse(PageResponse):
    groups: list[GroupRecord]
