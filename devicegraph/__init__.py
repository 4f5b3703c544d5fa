"""Python SDK for the Device Graph API."""

from devicegraph.client import DeviceGraphClient
from devicegraph.exceptions import (
    DeviceGraphAPIError,
    DeviceGraphAuthError,
    DeviceGraphClientError,
    DeviceGraphConflictError,
    DeviceGraphForbiddenError,
    DeviceGraphNotFoundError,
    DeviceGraphRateLimitError,
    DeviceGraphValidationError,
)
from devicegraph.types import MembershipInfo, MembershipsPage, ThingInfo, ThingsPage

__all__ = [
    "DeviceGraphAPIError",
    "DeviceGraphAuthError",
    "DeviceGraphClient",
    "DeviceGraphClientError",
    "DeviceGraphConflictError",
    "DeviceGraphForbiddenError",
    "DeviceGraphNotFoundError",
    "DeviceGraphRateLimitError",
    "DeviceGraphValidationError",
    "MembershipInfo",
    "MembershipsPage",
    "ThingInfo",
    "ThingsPage",
]
