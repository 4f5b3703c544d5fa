"""Backup document shape shared by export and restore."""

from __future__ import annotations

import json

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from app.errors import MalformedEntityError, UnsupportedMediaTypeError
from app.schemas.groups import GroupRecord
from app.schemas.memberships import MembershipRecord
from app.schemas.profiles import ProfileRecord
from app.schemas.things import ThingRecord

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_OCTET_STREAM = "application/octet-stream"


class BackupDocument(BaseModel):
    """Entity graph snapshot.

    Scoped exports fill only the collection they cover; the platform export
    fills all four. Any export can be posted back unchanged as a restore.
    """

    groups: list[GroupRecord] = Field(default_factory=list)
    profiles: list[ProfileRecord] = Field(default_factory=list)
    things: list[ThingRecord] = Field(default_factory=list)
    group_memberships: list[MembershipRecord] = Field(default_factory=list)

    def dump(self, *collections: str) -> dict:
        """Serialize the document, optionally limited to some collections.

        Parameters
        ----------
        *collections : str
            Collection names to keep; all of them when omitted.

        Returns
        -------
        dict
            JSON-compatible document.
        """
        include = set(collections) if collections else None
        return self.model_dump(mode="json", include=include, exclude_none=True)

    def to_bytes(self, *collections: str) -> bytes:
        """Encode the document as the byte stream served by scoped exports."""
        return json.dumps(self.dump(*collections), indent=2).encode("utf-8")


def decode_backup(content_type: str | None, body: bytes, *, expected: str) -> BackupDocument:
    """Decode a restore payload in either wire encoding.

    Parameters
    ----------
    content_type : str | None
        Declared ``Content-Type`` header.
    body : bytes
        Raw request body.
    expected : str
        Content type accepted by the calling endpoint.

    Returns
    -------
    BackupDocument
        Decoded document.
    """
    if content_type is None or expected not in content_type:
        raise UnsupportedMediaTypeError()
    try:
        return BackupDocument.model_validate_json(body or b"{}")
    except PydanticValidationError as exc:
        raise MalformedEntityError(f"malformed backup document: {exc.error_count()} errors") from exc
