"""Typed API errors.

Every error carries the HTTP status it maps to and a stable code that is
returned alongside the human-readable message, so clients can branch on the
code without parsing text.
"""

from __future__ import annotations

from fastapi import status


class DeviceGraphError(Exception):
    """Base class for errors rendered as JSON responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    message: str = "internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MissingCredentialError(DeviceGraphError):
    """No bearer token or thing key was supplied."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "missing_credential"
    message = "missing or invalid bearer user token"


class MissingThingKeyError(MissingCredentialError):
    """No thing key was supplied to a device-identity operation."""

    code = "missing_thing_key"
    message = "missing or invalid bearer entity key"


class InvalidCredentialError(DeviceGraphError):
    """The supplied credential does not resolve to an identity."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "invalid_credential"
    message = "invalid credentials"


class ForbiddenError(DeviceGraphError):
    """The caller is authenticated but lacks the required privilege."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    message = "insufficient privileges"


class NotFoundError(DeviceGraphError):
    """A referenced resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    message = "entity not found"


class ConflictError(DeviceGraphError):
    """A unique identifier or key is already taken."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    message = "entity already exists"


class UnsupportedMediaTypeError(DeviceGraphError):
    """The request body has an unexpected content type."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    code = "unsupported_content_type"
    message = "unsupported content type"


class ValidationError(DeviceGraphError):
    """A request failed local validation before any service call."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    message = "invalid request"


class MalformedEntityError(ValidationError):
    code = "malformed_entity"
    message = "malformed entity specification"


class MissingIDError(ValidationError):
    code = "missing_id"
    message = "missing entity id"

    def __init__(self, entity: str) -> None:
        super().__init__(f"missing {entity} id")


class InvalidIDFormatError(ValidationError):
    code = "invalid_id_format"
    message = "invalid id format provided"


class NameSizeError(ValidationError):
    code = "invalid_name_size"
    message = "invalid name size"


class EmailSizeError(ValidationError):
    code = "invalid_email_size"
    message = "invalid email size"


class LimitSizeError(ValidationError):
    code = "invalid_limit_size"
    message = "invalid limit size"


class OffsetSizeError(ValidationError):
    code = "invalid_offset_size"
    message = "invalid offset size"


class InvalidOrderError(ValidationError):
    code = "invalid_order"
    message = "invalid list order provided"


class InvalidDirectionError(ValidationError):
    code = "invalid_direction"
    message = "invalid list direction provided"


class EmptyListError(ValidationError):
    code = "empty_list"
    message = "empty list provided"


class MissingKeyError(ValidationError):
    code = "missing_key"
    message = "missing thing key"


class InvalidRoleError(ValidationError):
    code = "invalid_role"
    message = "invalid role"
