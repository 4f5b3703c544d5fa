"""Python SDK tests."""

import json

import httpx
import pytest

from devicegraph import (
    DeviceGraphAuthError,
    DeviceGraphClient,
    DeviceGraphConflictError,
    DeviceGraphForbiddenError,
    DeviceGraphValidationError,
    MembershipInfo,
)

THING = {
    "id": "7a1d2f9c-1b2e-4c3d-8e4f-5a6b7c8d9e0f",
    "name": "boiler",
    "group_id": "g1",
    "profile_id": "p1",
    "key": "k1",
    "metadata": {"floor": 1},
}


class TestDeviceGraphClient:
    """SDK client behavior tests."""

    def test_from_env_requires_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Reject missing token environment configuration.

        Parameters
        ----------
        monkeypatch : pytest.MonkeyPatch
            Environment monkeypatch helper.

        Returns
        -------
        None
            Asserts env validation.
        """
        monkeypatch.delenv("DEVICEGRAPH_TOKEN", raising=False)
        monkeypatch.setenv("DEVICEGRAPH_BASE_URL", "http://example.test")

        with pytest.raises(DeviceGraphValidationError):
            DeviceGraphClient.from_env()

    def test_list_and_search_share_parameters(self) -> None:
        """Send paging as query string for list and as body for search.

        Returns
        -------
        None
            Asserts request shapes and response parsing.
        """
        seen: list[tuple[str, str, dict]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["Authorization"] == "Bearer usr_test"
            if request.method == "GET":
                seen.append(("GET", request.url.path, dict(request.url.params)))
            else:
                seen.append(("POST", request.url.path, json.loads(request.content)))
            return httpx.Response(
                200, json={"total": 1, "offset": 0, "limit": 5, "things": [THING]}
            )

        client = DeviceGraphClient(
            base_url="http://devicegraph.test",
            token="usr_test",
            transport=httpx.MockTransport(handler),
        )

        listed = client.list_things(limit=5, name="boil", direction="desc")
        searched = client.search_things(limit=5, name="boil", direction="desc")

        assert listed == searched
        assert listed.things[0].external_key is None
        assert listed.things[0].metadata == {"floor": 1}
        assert seen == [
            ("GET", "/things", {"offset": "0", "limit": "5", "name": "boil", "dir": "desc"}),
            ("POST", "/things/search", {"offset": 0, "limit": 5, "name": "boil", "dir": "desc"}),
        ]

    def test_backup_bytes_are_restored_unchanged(self) -> None:
        document = b'{\n  "things": []\n}'
        received: list[tuple[str, str, bytes]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(
                    200,
                    content=document,
                    headers={"Content-Type": "application/octet-stream"},
                )
            received.append(
                (request.url.path, request.headers["Content-Type"], request.content)
            )
            return httpx.Response(201)

        client = DeviceGraphClient(
            base_url="http://devicegraph.test",
            token="usr_test",
            transport=httpx.MockTransport(handler),
        )

        exported = client.backup_things_by_group("g1")
        client.restore_things_by_group("g2", exported)

        assert received == [
            ("/groups/g2/things/restore", "application/octet-stream", document)
        ]

    def test_error_codes_map_to_typed_exceptions(self) -> None:
        statuses = iter([(401, "invalid_credential"), (403, "forbidden"), (409, "conflict")])

        def handler(request: httpx.Request) -> httpx.Response:
            _ = request
            status_code, code = next(statuses)
            return httpx.Response(status_code, json={"detail": "nope", "code": code})

        client = DeviceGraphClient(
            base_url="http://devicegraph.test",
            token="usr_test",
            transport=httpx.MockTransport(handler),
        )

        with pytest.raises(DeviceGraphAuthError):
            client.backup()
        with pytest.raises(DeviceGraphForbiddenError):
            client.backup_profiles_by_group("g1")
        with pytest.raises(DeviceGraphConflictError) as exc_info:
            client.restore({"groups": []})

        assert exc_info.value.status_code == 409
        assert exc_info.value.code == "conflict"
        assert str(exc_info.value) == "nope"

    def test_transient_errors_are_retried(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("devicegraph.client.sleep", lambda _: None)
        responses = iter([503, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            _ = request
            status_code = next(responses)
            if status_code != 200:
                return httpx.Response(status_code)
            return httpx.Response(
                200,
                json={
                    "total": 1,
                    "offset": 0,
                    "limit": 10,
                    "group_memberships": [
                        {"member_id": "u1", "email": "o@x", "role": "owner"}
                    ],
                },
            )

        client = DeviceGraphClient(
            base_url="http://devicegraph.test",
            token="usr_test",
            transport=httpx.MockTransport(handler),
        )

        page = client.list_memberships("g1")

        assert page.group_memberships == [MembershipInfo("u1", "o@x", "owner")]

    def test_memberships_and_identify_requests(self) -> None:
        requests: list[tuple[str, str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(
                (request.method, request.url.path, request.headers["Authorization"])
            )
            if request.url.path == "/identify":
                return httpx.Response(200, json={"id": THING["id"]})
            body = json.loads(request.content)
            assert body == {
                "group_memberships": [
                    {"member_id": "u2", "email": "e@x", "role": "editor"}
                ]
            }
            return httpx.Response(201)

        with DeviceGraphClient(
            base_url="http://devicegraph.test",
            token="usr_test",
            transport=httpx.MockTransport(handler),
        ) as client:
            client.create_memberships("g1", [MembershipInfo("u2", "e@x", "editor")])
            thing_id = client.identify("ext-1", external=True)

        assert thing_id == THING["id"]
        assert requests == [
            ("POST", "/groups/g1/memberships", "Bearer usr_test"),
            ("POST", "/identify", "External ext-1"),
        ]
