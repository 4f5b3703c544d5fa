"""Profile request descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.requests.common import (
    require_id,
    require_items,
    require_token,
    validate_name,
    validate_optional_uuid,
)
from app.schemas.profiles import ProfileCreate


@dataclass(frozen=True, slots=True)
class CreateProfilesReq:
    token: str
    group_id: str
    profiles: tuple[ProfileCreate, ...]

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.group_id, "group")
        require_items(self.profiles)
        for profile in self.profiles:
            validate_optional_uuid(profile.id)
            validate_name(profile.name)


@dataclass(frozen=True, slots=True)
class UpdateProfileReq:
    token: str
    id: str
    name: str
    config: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.id, "profile")
        validate_name(self.name)
