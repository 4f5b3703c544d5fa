"""Identity, group and profile tests."""

from conftest import auth, create_things


class TestIdentity:
    """Bootstrap, users and organizations."""

    async def test_bootstrap_runs_once(self, client, world) -> None:
        response = await client.post("/bootstrap", json={"email": "again@example.com"})

        assert response.status_code == 409

    async def test_bootstrap_can_be_disabled(self, client, monkeypatch) -> None:
        monkeypatch.setenv("DEVICEGRAPH_BOOTSTRAP_ENABLED", "false")

        response = await client.post("/bootstrap", json={"email": "root@example.com"})

        assert response.status_code == 403

    async def test_only_platform_admin_creates_users(self, client, world) -> None:
        response = await client.post(
            "/users", headers=auth(world.owner_token), json={"email": "x@example.com"}
        )

        assert response.status_code == 403

    async def test_invalid_token_is_unauthorized(self, client, world) -> None:
        response = await client.get("/groups", headers=auth("usr_not-a-token"))

        assert response.status_code == 401
        assert response.json()["code"] == "invalid_credential"

    async def test_duplicate_email_is_conflict(self, client, world) -> None:
        response = await client.post(
            "/users", headers=auth(world.admin_token), json={"email": "owner@example.com"}
        )

        assert response.status_code == 409

    async def test_org_members_need_org_admin(self, client, world) -> None:
        response = await client.post(
            f"/orgs/{world.org_id}/members",
            headers=auth(world.member_token),
            json={"members": [{"member_id": world.outsider_id, "role": "viewer"}]},
        )

        assert response.status_code == 403


class TestGroups:
    """Group lifecycle and listing."""

    async def test_create_many_keeps_request_order(self, client, world) -> None:
        created = await client.post(
            f"/orgs/{world.org_id}/groups",
            headers=auth(world.owner_token),
            json={"groups": [{"name": "zeta"}, {"name": "alpha"}, {"name": "mid"}]},
        )

        listed = await client.get(
            f"/orgs/{world.org_id}/groups", headers=auth(world.owner_token)
        )
        by_name = await client.get(
            f"/orgs/{world.org_id}/groups",
            headers=auth(world.owner_token),
            params={"order": "name"},
        )

        assert created.status_code == 201
        assert [g["name"] for g in listed.json()["groups"]] == [
            "plant-a",
            "zeta",
            "alpha",
            "mid",
        ]
        assert [g["name"] for g in by_name.json()["groups"]] == [
            "alpha",
            "mid",
            "plant-a",
            "zeta",
        ]
        assert created.json()["groups"][0]["owner_id"] == world.owner_id

    async def test_viewer_sees_but_cannot_update(self, client, world) -> None:
        viewed = await client.get(
            f"/groups/{world.group_id}", headers=auth(world.member_token)
        )
        updated = await client.put(
            f"/groups/{world.group_id}",
            headers=auth(world.member_token),
            json={"name": "renamed"},
        )

        assert viewed.status_code == 200
        assert viewed.json()["org_id"] == world.org_id
        assert updated.status_code == 403

    async def test_owner_updates_group(self, client, world) -> None:
        response = await client.put(
            f"/groups/{world.group_id}",
            headers=auth(world.owner_token),
            json={"name": "renamed", "description": "north", "metadata": {"k": "v"}},
        )

        assert response.status_code == 200
        assert response.json()["name"] == "renamed"
        assert response.json()["description"] == "north"
        assert response.json()["metadata"] == {"k": "v"}

    async def test_remove_cascades_to_dependents(self, client, world) -> None:
        await create_things(client, world.owner_token, world.profile_id, [{"name": "a"}])

        removed = await client.delete(
            f"/groups/{world.group_id}", headers=auth(world.owner_token)
        )
        group = await client.get(
            f"/groups/{world.group_id}", headers=auth(world.owner_token)
        )
        things = await client.get("/things", headers=auth(world.owner_token))
        profiles = await client.get("/profiles", headers=auth(world.owner_token))

        assert removed.status_code == 204
        assert group.status_code == 404
        assert things.json()["total"] == 0
        assert profiles.json()["total"] == 0

    async def test_bulk_remove_is_atomic(self, client, world) -> None:
        response = await client.patch(
            "/groups",
            headers=auth(world.owner_token),
            json={"group_ids": [world.group_id, "5b0f3f0e-2a8b-4d1c-9a4f-0e7d2c1b3a49"]},
        )
        group = await client.get(
            f"/groups/{world.group_id}", headers=auth(world.owner_token)
        )

        assert response.status_code == 404
        assert group.status_code == 200

    async def test_search_groups(self, client, world) -> None:
        response = await client.post(
            "/groups/search", headers=auth(world.member_token), json={"name": "PLANT"}
        )
        outsider = await client.post(
            f"/orgs/{world.org_id}/groups/search", headers=auth(world.outsider_token)
        )

        assert response.json()["total"] == 1
        assert response.json()["name"] == "PLANT"
        assert outsider.status_code == 403


class TestProfiles:
    """Profile lifecycle and listing."""

    async def test_update_view_and_remove(self, client, world) -> None:
        updated = await client.put(
            f"/profiles/{world.profile_id}",
            headers=auth(world.owner_token),
            json={"name": "sensor-v2", "config": {"interval": 60}},
        )
        viewed = await client.get(
            f"/profiles/{world.profile_id}", headers=auth(world.member_token)
        )
        removed = await client.patch(
            "/profiles",
            headers=auth(world.owner_token),
            json={"profile_ids": [world.profile_id]},
        )
        after = await client.get(
            f"/profiles/{world.profile_id}", headers=auth(world.owner_token)
        )

        assert updated.status_code == 200
        assert viewed.json()["config"] == {"interval": 60}
        assert viewed.json()["name"] == "sensor-v2"
        assert removed.status_code == 204
        assert after.status_code == 404

    async def test_listing_by_group_and_org(self, client, world) -> None:
        await client.post(
            f"/groups/{world.group_id}/profiles",
            headers=auth(world.owner_token),
            json={"profiles": [{"name": "gateway"}]},
        )

        by_group = await client.get(
            f"/groups/{world.group_id}/profiles",
            headers=auth(world.member_token),
            params={"order": "name", "dir": "desc"},
        )
        by_org = await client.post(
            f"/orgs/{world.org_id}/profiles/search",
            headers=auth(world.member_token),
            json={"limit": 1},
        )

        assert [p["name"] for p in by_group.json()["profiles"]] == ["sensor", "gateway"]
        assert by_org.json()["total"] == 2
        assert len(by_org.json()["profiles"]) == 1

    async def test_malformed_body_is_bad_request(self, client, world) -> None:
        response = await client.post(
            f"/groups/{world.group_id}/profiles",
            headers={**auth(world.owner_token), "Content-Type": "application/json"},
            content=b"{not json",
        )

        assert response.status_code == 400
        assert response.json()["code"] == "malformed_entity"
