"""Synchronous Python SDK client."""

from __future__ import annotations

import os
from time import sleep
from typing import Any

import httpx

from devicegraph.exceptions import (
    DeviceGraphAPIError,
    DeviceGraphAuthError,
    DeviceGraphConflictError,
    DeviceGraphForbiddenError,
    DeviceGraphNotFoundError,
    DeviceGraphRateLimitError,
    DeviceGraphValidationError,
)
from devicegraph.types import MembershipInfo, MembershipsPage, ThingInfo, ThingsPage

OCTET_STREAM = "application/octet-stream"


class DeviceGraphClient:
    """Client for the Device Graph API.

    Parameters
    ----------
    base_url : str
        Service base URL.
    token : str
        User bearer token.
    timeout : float, default=10.0
        Request timeout in seconds.
    max_retries : int, default=2
        Number of retries for transient errors.
    transport : httpx.BaseTransport | None, default=None
        Optional transport for tests or advanced usage.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token: str,
        timeout: float = 10.0,
        max_retries: int = 2,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self.token}"},
            timeout=self.timeout,
            transport=transport,
        )

    @classmethod
    def from_env(cls) -> "DeviceGraphClient":
        """Build a client from environment variables.

        Expected variables
        ------------------
        DEVICEGRAPH_BASE_URL
            Service base URL. Defaults to ``http://127.0.0.1:8000``.
        DEVICEGRAPH_TOKEN
            Required user bearer token.

        Returns
        -------
        DeviceGraphClient
            Configured SDK client.
        """
        base_url = os.environ.get("DEVICEGRAPH_BASE_URL", "http://127.0.0.1:8000")
        token = os.environ.get("DEVICEGRAPH_TOKEN")
        if not token:
            raise DeviceGraphValidationError(
                "DEVICEGRAPH_TOKEN is required to create the client"
            )
        return cls(base_url=base_url, token=token)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def list_things(
        self,
        *,
        offset: int = 0,
        limit: int = 10,
        name: str | None = None,
        order: str | None = None,
        direction: str | None = None,
    ) -> ThingsPage:
        """List things visible to the caller.

        Parameters
        ----------
        offset : int, default=0
            Number of things to skip.
        limit : int, default=10
            Page size.
        name : str | None, default=None
            Case-insensitive name substring filter.
        order : str | None, default=None
            ``name`` or ``id``; creation order when omitted.
        direction : str | None, default=None
            ``asc`` or ``desc``.

        Returns
        -------
        ThingsPage
            Requested page.
        """
        params = _page_params(offset, limit, name, order, direction)
        response = self._request("GET", "/things", params=params)
        return _things_page(response.json())

    def search_things(
        self,
        *,
        offset: int = 0,
        limit: int = 10,
        name: str | None = None,
        order: str | None = None,
        direction: str | None = None,
    ) -> ThingsPage:
        """Same as ``list_things`` with the parameters sent as a JSON body."""
        body = _page_params(offset, limit, name, order, direction)
        response = self._request("POST", "/things/search", json=body)
        return _things_page(response.json())

    def list_things_by_group(
        self, group_id: str, *, offset: int = 0, limit: int = 10
    ) -> ThingsPage:
        response = self._request(
            "GET",
            f"/groups/{group_id}/things",
            params={"offset": offset, "limit": limit},
        )
        return _things_page(response.json())

    def backup_things_by_group(self, group_id: str) -> bytes:
        """Download a group's things as a restorable document.

        Parameters
        ----------
        group_id : str
            Group identifier.

        Returns
        -------
        bytes
            Raw document; post it unchanged to ``restore_things_by_group``.
        """
        return self._request("GET", f"/groups/{group_id}/things/backup").content

    def restore_things_by_group(self, group_id: str, document: bytes) -> None:
        self._request(
            "POST",
            f"/groups/{group_id}/things/restore",
            content=document,
            headers={"Content-Type": OCTET_STREAM},
        )

    def backup_profiles_by_group(self, group_id: str) -> bytes:
        return self._request("GET", f"/groups/{group_id}/profiles/backup").content

    def restore_profiles_by_group(self, group_id: str, document: bytes) -> None:
        self._request(
            "POST",
            f"/groups/{group_id}/profiles/restore",
            content=document,
            headers={"Content-Type": OCTET_STREAM},
        )

    def backup(self) -> dict[str, Any]:
        """Export the whole platform; requires a platform administrator."""
        return self._request("GET", "/backup").json()

    def restore(self, document: dict[str, Any]) -> None:
        """Restore a platform export produced by ``backup``."""
        self._request("POST", "/restore", json=document)

    def create_memberships(
        self, group_id: str, memberships: list[MembershipInfo]
    ) -> None:
        """Grant roles in a group.

        Parameters
        ----------
        group_id : str
            Group identifier.
        memberships : list[MembershipInfo]
            Members to add; ``owner`` roles are rejected by the server.

        Returns
        -------
        None
            Creates the memberships.
        """
        body = {
            "group_memberships": [
                {"member_id": m.member_id, "email": m.email, "role": m.role}
                for m in memberships
            ]
        }
        self._request("POST", f"/groups/{group_id}/memberships", json=body)

    def list_memberships(
        self,
        group_id: str,
        *,
        offset: int = 0,
        limit: int = 10,
        email: str | None = None,
    ) -> MembershipsPage:
        params: dict[str, Any] = {"offset": offset, "limit": limit}
        if email is not None:
            params["email"] = email
        response = self._request(
            "GET", f"/groups/{group_id}/memberships", params=params
        )
        data = response.json()
        return MembershipsPage(
            total=data["total"],
            offset=data["offset"],
            limit=data["limit"],
            group_memberships=[
                MembershipInfo(**item) for item in data["group_memberships"]
            ],
        )

    def identify(self, thing_key: str, *, external: bool = False) -> str:
        """Return the id of the thing holding ``thing_key``."""
        scheme = "External" if external else "Thing"
        response = self._request(
            "POST",
            "/identify",
            headers={"Authorization": f"{scheme} {thing_key}"},
        )
        return response.json()["id"]

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send an HTTP request with light retry logic.

        Parameters
        ----------
        method : str
            HTTP method.
        path : str
            Relative request path.
        **kwargs : Any
            Additional request arguments.

        Returns
        -------
        httpx.Response
            Successful response.
        """
        attempts = self.max_retries + 1
        last_exception: Exception | None = None
        for attempt in range(attempts):
            try:
                response = self._client.request(method, path, **kwargs)
            except httpx.HTTPError as exc:
                last_exception = exc
                if attempt < self.max_retries:
                    sleep(0.1 * (attempt + 1))
                    continue
                raise DeviceGraphAPIError(str(exc)) from exc

            if response.status_code < 400:
                return response
            if _is_transient_response(response) and attempt < self.max_retries:
                sleep(0.1 * (attempt + 1))
                continue
            raise _exception_for_response(response)

        if last_exception is not None:
            raise DeviceGraphAPIError(str(last_exception)) from last_exception
        raise DeviceGraphAPIError("Request failed")

    def __enter__(self) -> "DeviceGraphClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        _ = (exc_type, exc_value, traceback)
        self.close()


def _page_params(
    offset: int,
    limit: int,
    name: str | None,
    order: str | None,
    direction: str | None,
) -> dict[str, Any]:
    params: dict[str, Any] = {"offset": offset, "limit": limit}
    if name is not None:
        params["name"] = name
    if order is not None:
        params["order"] = order
    if direction is not None:
        params["dir"] = direction
    return params


def _things_page(data: dict[str, Any]) -> ThingsPage:
    return ThingsPage(
        total=data["total"],
        offset=data["offset"],
        limit=data["limit"],
        things=[
            ThingInfo(
                id=item["id"],
                name=item["name"],
                group_id=item["group_id"],
                profile_id=item["profile_id"],
                key=item["key"],
                external_key=item.get("external_key"),
                metadata=item.get("metadata", {}),
            )
            for item in data["things"]
        ],
    )


def _is_transient_response(response: httpx.Response) -> bool:
    """Return whether a response is worth retrying."""
    return response.status_code in {429, 502, 503, 504}


def _exception_for_response(response: httpx.Response) -> DeviceGraphAPIError:
    """Map an error response to a typed SDK exception.

    Parameters
    ----------
    response : httpx.Response
        HTTP response.

    Returns
    -------
    DeviceGraphAPIError
        Typed SDK error.
    """
    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    message = data.get("detail") or (
        f"Device Graph request failed with status {response.status_code}"
    )
    code = data.get("code")

    error_types: dict[int, type[DeviceGraphAPIError]] = {
        401: DeviceGraphAuthError,
        403: DeviceGraphForbiddenError,
        404: DeviceGraphNotFoundError,
        409: DeviceGraphConflictError,
        429: DeviceGraphRateLimitError,
        400: DeviceGraphValidationError,
        415: DeviceGraphValidationError,
        422: DeviceGraphValidationError,
    }
    error_type = error_types.get(response.status_code, DeviceGraphAPIError)
    return error_type(message, status_code=response.status_code, code=code)
