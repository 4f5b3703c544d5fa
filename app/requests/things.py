"""Thing request descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.errors import MissingKeyError, MissingThingKeyError, ValidationError
from app.requests.common import (
    require_id,
    require_items,
    require_token,
    validate_name,
    validate_optional_uuid,
)
from app.schemas.things import ThingCreate

INTERNAL_KEY = "internal"
EXTERNAL_KEY = "external"


@dataclass(frozen=True, slots=True)
class CreateThingsReq:
    token: str
    profile_id: str
    things: tuple[ThingCreate, ...]

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.profile_id, "profile")
        require_items(self.things)
        for thing in self.things:
            validate_optional_uuid(thing.id)
            validate_name(thing.name)


@dataclass(frozen=True, slots=True)
class UpdateThingReq:
    token: str
    id: str
    name: str
    key: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.id, "thing")
        if not self.key:
            raise MissingKeyError()
        validate_name(self.name)


@dataclass(frozen=True, slots=True)
class UpdateThingProfileReq:
    token: str
    id: str
    profile_id: str
    group_id: str

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.id, "thing")
        require_id(self.profile_id, "profile")
        require_id(self.group_id, "group")


@dataclass(frozen=True, slots=True)
class UpdateExternalKeyReq:
    token: str
    id: str
    key: str

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.id, "thing")
        if not self.key:
            raise MissingKeyError("missing external thing key")


@dataclass(frozen=True, slots=True)
class ThingKeyReq:
    """Device-authenticated request carrying a thing key."""

    value: str
    key_type: str = INTERNAL_KEY

    def validate(self) -> None:
        if not self.value:
            raise MissingThingKeyError()
        if self.key_type not in (INTERNAL_KEY, EXTERNAL_KEY):
            raise ValidationError("invalid thing key type")
