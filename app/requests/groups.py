"""Group request descriptors."""

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
from app.schemas.groups import GroupCreate


@dataclass(frozen=True, slots=True)
class CreateGroupsReq:
    token: str
    org_id: str
    groups: tuple[GroupCreate, ...]

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.org_id, "org")
        require_items(self.groups)
        for group in self.groups:
            validate_optional_uuid(group.id)
            validate_name(group.name)


@dataclass(frozen=True, slots=True)
class UpdateGroupReq:
    token: str
    id: str
    name: str
    description: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.id, "group")
        validate_name(self.name)
