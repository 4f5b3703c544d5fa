"""SDK exception types."""

from __future__ import annotations


class DeviceGraphClientError(Exception):
    """Base SDK error."""


class DeviceGraphAPIError(DeviceGraphClientError):
    """API request failed.

    Parameters
    ----------
    message : str
        Error message.
    status_code : int | None, default=None
        HTTP status code if available.
    code : str | None, default=None
        Machine-readable error code returned by the server.
    """

    def __init__(
        self, message: str, status_code: int | None = None, code: str | None = None
    ) -> None:
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class DeviceGraphAuthError(DeviceGraphAPIError):
    """Authentication failed."""


class DeviceGraphForbiddenError(DeviceGraphAPIError):
    """The caller lacks the role the operation needs."""


class DeviceGraphValidationError(DeviceGraphAPIError):
    """Request was rejected before reaching the service."""


class DeviceGraphNotFoundError(DeviceGraphAPIError):
    """Requested resource was not found."""


class DeviceGraphConflictError(DeviceGraphAPIError):
    """Request conflicted with current server state."""


class DeviceGraphRateLimitError(DeviceGraphAPIError):
    """Caller hit a rate limit."""
