"""Backup and restore tests."""

import json

from conftest import auth, create_things

OCTET = {"Content-Type": "application/octet-stream"}


async def _seed_things(client, world) -> list[dict]:
    things = await create_things(
        client,
        world.owner_token,
        world.profile_id,
        [{"name": "a"}, {"name": "b", "external_key": "ext-b"}, {"name": "c"}],
    )
    return things


class TestScopedBackup:
    """Group and organization exports."""

    async def test_group_things_backup_requires_admin_role(self, client, world) -> None:
        """Non-owner members are refused; owner and platform admin succeed.

        Parameters
        ----------
        client : AsyncClient
            Test HTTP client.
        world : World
            Seeded tenant.

        Returns
        -------
        None
            Asserts status codes and exported content.
        """
        things = await _seed_things(client, world)
        path = f"/groups/{world.group_id}/things/backup"

        member = await client.get(path, headers=auth(world.member_token))
        owner = await client.get(path, headers=auth(world.owner_token))
        admin = await client.get(path, headers=auth(world.admin_token))

        assert member.status_code == 403
        assert owner.status_code == 200
        assert admin.status_code == 200
        assert owner.headers["content-type"] == "application/octet-stream"
        assert owner.headers["content-disposition"] == (
            f'attachment; filename="things-backup-{world.group_id}.json"'
        )
        exported = json.loads(owner.content)
        assert set(exported) == {"things"}
        assert {thing["id"] for thing in exported["things"]} == {
            thing["id"] for thing in things
        }
        external = {thing["name"]: thing.get("external_key") for thing in exported["things"]}
        assert external == {"a": None, "b": "ext-b", "c": None}
        assert json.loads(admin.content) == exported

    async def test_export_is_read_only(self, client, world) -> None:
        await _seed_things(client, world)
        path = f"/orgs/{world.org_id}/profiles/backup"

        first = await client.get(path, headers=auth(world.owner_token))
        second = await client.get(path, headers=auth(world.owner_token))

        assert first.content == second.content
        assert len(json.loads(first.content)["profiles"]) == 1

    async def test_membership_backup_leaves_out_owner(self, client, world) -> None:
        await client.post(
            f"/groups/{world.group_id}/memberships",
            headers=auth(world.owner_token),
            json={
                "group_memberships": [
                    {"member_id": world.outsider_id, "role": "viewer"}
                ]
            },
        )

        response = await client.get(
            f"/groups/{world.group_id}/memberships/backup",
            headers=auth(world.owner_token),
        )

        assert json.loads(response.content) == {
            "group_memberships": [
                {
                    "group_id": world.group_id,
                    "member_id": world.outsider_id,
                    "email": "outsider@example.com",
                    "role": "viewer",
                }
            ]
        }


class TestScopedRestore:
    """Byte-stream restores."""

    async def test_org_things_restore_requires_admin_role(self, client, world) -> None:
        things = await _seed_things(client, world)
        backup = await client.get(
            f"/orgs/{world.org_id}/things/backup", headers=auth(world.owner_token)
        )
        await client.patch(
            "/things",
            headers=auth(world.owner_token),
            json={"thing_ids": [thing["id"] for thing in things]},
        )
        path = f"/orgs/{world.org_id}/things/restore"

        member = await client.post(
            path, headers={**auth(world.member_token), **OCTET}, content=backup.content
        )
        owner = await client.post(
            path, headers={**auth(world.owner_token), **OCTET}, content=backup.content
        )

        assert member.status_code == 403
        assert owner.status_code == 201

    async def test_backup_restore_round_trip(self, client, world) -> None:
        await _seed_things(client, world)
        backup_path = f"/groups/{world.group_id}/things/backup"
        before = await client.get(backup_path, headers=auth(world.owner_token))
        listed_before = await client.get(
            f"/groups/{world.group_id}/things", headers=auth(world.owner_token)
        )
        await client.patch(
            "/things",
            headers=auth(world.owner_token),
            json={"thing_ids": [t["id"] for t in json.loads(before.content)["things"]]},
        )

        restored = await client.post(
            f"/groups/{world.group_id}/things/restore",
            headers={**auth(world.owner_token), **OCTET},
            content=before.content,
        )
        after = await client.get(backup_path, headers=auth(world.owner_token))
        listed_after = await client.get(
            f"/groups/{world.group_id}/things", headers=auth(world.owner_token)
        )

        assert restored.status_code == 201
        assert json.loads(after.content) == json.loads(before.content)
        assert listed_after.json() == listed_before.json()

    async def test_restoring_twice_is_conflict(self, client, world) -> None:
        await _seed_things(client, world)
        backup = await client.get(
            f"/groups/{world.group_id}/things/backup", headers=auth(world.owner_token)
        )

        response = await client.post(
            f"/groups/{world.group_id}/things/restore",
            headers={**auth(world.owner_token), **OCTET},
            content=backup.content,
        )

        assert response.status_code == 409
        assert "thing" in response.json()["detail"]

    async def test_restore_is_all_or_nothing(self, client, world) -> None:
        [existing] = await create_things(
            client, world.owner_token, world.profile_id, [{"name": "kept", "key": "k1"}]
        )
        document = {
            "things": [
                {"name": "new", "profile_id": world.profile_id, "key": "k2"},
                {"name": "clash", "profile_id": world.profile_id, "key": "k1"},
            ]
        }

        response = await client.post(
            f"/groups/{world.group_id}/things/restore",
            headers={**auth(world.owner_token), **OCTET},
            content=json.dumps(document).encode(),
        )
        listed = await client.get(
            f"/groups/{world.group_id}/things", headers=auth(world.owner_token)
        )

        assert response.status_code == 409
        assert [thing["id"] for thing in listed.json()["things"]] == [existing["id"]]

    async def test_profiles_without_group_land_in_target_group(self, client, world) -> None:
        document = {"profiles": [{"name": "imported", "config": {"mode": "eco"}}]}

        response = await client.post(
            f"/groups/{world.group_id}/profiles/restore",
            headers={**auth(world.owner_token), **OCTET},
            content=json.dumps(document).encode(),
        )
        listed = await client.get(
            f"/groups/{world.group_id}/profiles",
            headers=auth(world.owner_token),
            params={"name": "imported"},
        )

        assert response.status_code == 201
        assert listed.json()["profiles"][0]["config"] == {"mode": "eco"}

    async def test_parent_outside_scope_is_forbidden(self, client, world) -> None:
        groups = await client.post(
            f"/orgs/{world.org_id}/groups",
            headers=auth(world.owner_token),
            json={"groups": [{"name": "plant-b"}]},
        )
        other_group = groups.json()["groups"][0]["id"]
        document = {"things": [{"name": "stray", "profile_id": world.profile_id}]}

        response = await client.post(
            f"/groups/{other_group}/things/restore",
            headers={**auth(world.owner_token), **OCTET},
            content=json.dumps(document).encode(),
        )

        assert response.status_code == 403

    async def test_missing_parent_is_not_found(self, client, world) -> None:
        document = {
            "things": [
                {
                    "name": "orphan",
                    "profile_id": "0b7c6a2e-4f53-4c55-8b0b-7c1f7a9f2d10",
                }
            ]
        }

        response = await client.post(
            f"/groups/{world.group_id}/things/restore",
            headers={**auth(world.owner_token), **OCTET},
            content=json.dumps(document).encode(),
        )

        assert response.status_code == 404

    async def test_wrong_encoding_and_empty_documents(self, client, world) -> None:
        path = f"/groups/{world.group_id}/things/restore"

        as_json = await client.post(
            path, headers=auth(world.owner_token), json={"things": []}
        )
        empty = await client.post(
            path, headers={**auth(world.owner_token), **OCTET}, content=b'{"things": []}'
        )
        garbage = await client.post(
            path, headers={**auth(world.owner_token), **OCTET}, content=b"not json"
        )

        assert as_json.status_code == 415
        assert empty.status_code == 400
        assert empty.json()["code"] == "empty_list"
        assert garbage.status_code == 400
        assert garbage.json()["code"] == "malformed_entity"


class TestPlatformBackup:
    """Whole-platform export and import."""

    async def test_platform_round_trip(self, client, world) -> None:
        await _seed_things(client, world)
        await client.post(
            f"/groups/{world.group_id}/memberships",
            headers=auth(world.owner_token),
            json={
                "group_memberships": [
                    {"member_id": world.outsider_id, "role": "editor"}
                ]
            },
        )
        backup = await client.get("/backup", headers=auth(world.admin_token))
        document = backup.json()
        await client.delete(f"/groups/{world.group_id}", headers=auth(world.owner_token))
        emptied = await client.get("/backup", headers=auth(world.admin_token))

        restored = await client.post(
            "/restore", headers=auth(world.admin_token), json=document
        )
        again = await client.get("/backup", headers=auth(world.admin_token))

        assert backup.status_code == 200
        assert set(document) == {"groups", "profiles", "things", "group_memberships"}
        assert len(document["things"]) == 3
        assert emptied.json()["things"] == []
        assert restored.status_code == 201
        assert again.json() == document

    async def test_platform_backup_needs_platform_admin(self, client, world) -> None:
        backup = await client.get("/backup", headers=auth(world.owner_token))
        restore = await client.post(
            "/restore",
            headers=auth(world.owner_token),
            json={"groups": [], "things": []},
        )

        assert backup.status_code == 403
        assert restore.status_code == 400

    async def test_platform_restore_accepts_json_only(self, client, world) -> None:
        response = await client.post(
            "/restore",
            headers={**auth(world.admin_token), **OCTET},
            content=b'{"groups": []}',
        )

        assert response.status_code == 415
