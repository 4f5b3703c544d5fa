"""Thing schemas."""

from typing import Any

from pydantic import BaseModel, Field

from app.schemas.common import APIModel, PageResponse


class ThingRecord(APIModel):
    """Thing as listed, exported and restored."""

    id: str = ""
    group_id: str = ""
    profile_id: str = ""
    name: str = ""
    key: str = ""
    external_key: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ThingCreate(BaseModel):
    """One thing to create; an empty key is generated server-side."""

    id: str = ""
    name: str = ""
    key: str = ""
    external_key: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class CreateThingsBody(BaseModel):
    things: list[ThingCreate] = Field(default_factory=list)


class ThingUpdate(BaseModel):
    name: str = ""
    key: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class ThingProfileUpdate(BaseModel):
    """Move a thing to another profile, possibly in another group."""

    profile_id: str = ""
    group_id: str = ""


class ExternalKeyUpdate(BaseModel):
    key: str = ""


class RemoveThingsBody(BaseModel):
    thing_ids: list[str] = Field(default_factory=list)


class ThingsResponse(APIModel):
    things: list[ThingRecord]


class ThingsPageResponse(PageResponse):
    things: list[ThingRecord]


class IdentityResponse(APIModel):
    id: str


class ThingMetadataResponse(APIModel):
    metadata: dict[str, Any]
