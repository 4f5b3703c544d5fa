"""Profile schemas."""

from typing import Any

from pydantic import BaseModel, Field

from app.schemas.common import APIModel, PageResponse


class ProfileRecord(APIModel):
    """Profile as listed, exported and restored.

    ``group_id`` may be empty in a restore document; scoped restores then
    place the profile in the target group.
    """

    id: str = ""
    group_id: str = ""
    name: str = ""
    config: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ProfileCreate(BaseModel):
    """One profile to create."""

    id: str = ""
    name: str = ""
    config: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)


class CreateProfilesBody(BaseModel):
    profiles: list[ProfileCreate] = Field(default_factory=list)


class ProfileUpdate(BaseModel):
    name: str = ""
    config: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)


class RemoveProfilesBody(BaseModel):
    profile_ids: list[str] = Field(default_factory=list)


class ProfilesResponse(APIModel):
    profiles: list[ProfileRecord]


class ProfilesPageResponse(PageResponse):
    profiles: list[ProfileRecord]
