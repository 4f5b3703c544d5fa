"""Shared request checks and generic descriptors."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from app.errors import (
    EmptyListError,
    InvalidIDFormatError,
    MissingCredentialError,
    MissingIDError,
    NameSizeError,
)
from app.paging import MAX_NAME_SIZE, PageMetadata, validate_page_metadata

MAX_LIMIT_SIZE = 200


def require_token(token: str) -> None:
    """Raise when no bearer token was supplied."""
    if not token:
        raise MissingCredentialError()


def require_id(value: str, entity: str) -> None:
    """Raise when a path or body identifier is missing."""
    if not value:
        raise MissingIDError(entity)


def validate_uuid(value: str) -> None:
    """Accept only canonical lowercase UUID strings.

    Parameters
    ----------
    value : str
        Client-supplied identifier.

    Returns
    -------
    None
        Raises ``InvalidIDFormatError`` for anything else.
    """
    try:
        parsed = uuid.UUID(value)
    except (ValueError, AttributeError, TypeError) as exc:
        raise InvalidIDFormatError() from exc
    if str(parsed) != value:
        raise InvalidIDFormatError()


def validate_optional_uuid(value: str) -> None:
    if value:
        validate_uuid(value)


def validate_name(name: str, *, required: bool = True) -> None:
    """Check a name against the size bounds.

    Parameters
    ----------
    name : str
        Name to check.
    required : bool, default=True
        Whether an empty name is rejected.

    Returns
    -------
    None
        Raises ``NameSizeError`` on violation.
    """
    if (required and not name) or len(name) > MAX_NAME_SIZE:
        raise NameSizeError()


def require_items(items: Iterable[object]) -> None:
    if not list(items):
        raise EmptyListError()


@dataclass(frozen=True, slots=True)
class ListReq:
    """Unscoped listing or search."""

    token: str
    page: PageMetadata
    max_limit: int = MAX_LIMIT_SIZE

    def validate(self) -> None:
        require_token(self.token)
        validate_page_metadata(self.page, max_limit=self.max_limit)


@dataclass(frozen=True, slots=True)
class ListByScopeReq:
    """Listing or search bounded by a group, profile or organization."""

    token: str
    scope: str
    scope_id: str
    page: PageMetadata
    max_limit: int = MAX_LIMIT_SIZE

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.scope_id, self.scope)
        validate_page_metadata(self.page, max_limit=self.max_limit)


@dataclass(frozen=True, slots=True)
class ResourceReq:
    """Single entity view or removal."""

    token: str
    entity: str
    id: str

    def validate(self) -> None:
        require_token(self.token)
        require_id(self.id, self.entity)


@dataclass(frozen=True, slots=True)
class RemoveReq:
    """Bulk removal by identifier."""

    token: str
    entity: str
    ids: tuple[str, ...]

    def validate(self) -> None:
        require_token(self.token)
        require_items(self.ids)
        for entity_id in self.ids:
            require_id(entity_id, self.entity)
