"""Backup transfer script tests."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from fastapi import Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import build_engine, create_schema, get_session
from app.main import app
from conftest import auth, create_things
from scripts.transfer_backup import transfer

TARGET_HOST = "target"


@pytest.fixture()
async def target(client: AsyncClient, tmp_path: Path) -> AsyncIterator[AsyncClient]:
    """Create a client for a second deployment with its own database.

    Requests sent to the ``target`` host use the second database; every
    other host keeps the database behind ``client``.

    Parameters
    ----------
    client : AsyncClient
        Client of the source deployment.
    tmp_path : Path
        Temporary directory for the target database.

    Yields
    ------
    AsyncClient
        Client of the target deployment.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'target.db'}")
    target_sessions = async_sessionmaker(
        engine, expire_on_commit=False, class_=AsyncSession
    )
    await create_schema(engine)
    source_session = app.dependency_overrides[get_session]

    async def _routed_session(request: Request) -> AsyncIterator[AsyncSession]:
        if request.url.hostname == TARGET_HOST:
            async with target_sessions() as session:
                yield session
        else:
            async for session in source_session():
                yield session

    app.dependency_overrides[get_session] = _routed_session
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url=f"http://{TARGET_HOST}",
    ) as target_client:
        yield target_client

    await engine.dispose()


async def _target_group(target: AsyncClient) -> tuple[str, str]:
    bootstrap = await target.post(
        "/bootstrap", json={"email": "ops@example.com", "token_name": "root"}
    )
    assert bootstrap.status_code == 201, bootstrap.text
    token = bootstrap.json()["token"]["token"]
    org = await target.post("/orgs", headers=auth(token), json={"name": "Replica"})
    groups = await target.post(
        f"/orgs/{org.json()['id']}/groups",
        headers=auth(token),
        json={"groups": [{"name": "plant-b"}]},
    )
    assert groups.status_code == 201, groups.text
    return token, groups.json()["groups"][0]["id"]


class TestTransfer:
    """Copying a group between deployments."""

    async def test_copies_profiles_then_things_into_other_group(
        self, client, world, target
    ) -> None:
        """Profiles land in the target group and things follow them.

        Parameters
        ----------
        client : AsyncClient
            Source deployment client.
        world : World
            Seeded source tenant.
        target : AsyncClient
            Target deployment client.

        Returns
        -------
        None
            Asserts the copied entities in the target group.
        """
        things = await create_things(
            client,
            world.owner_token,
            world.profile_id,
            [{"name": "valve"}, {"name": "meter", "external_key": "ext-meter"}],
        )
        target_token, target_group = await _target_group(target)
        assert target_group != world.group_id
        client.headers.update(auth(world.owner_token))
        target.headers.update(auth(target_token))

        copied = [
            await transfer(
                client,
                target,
                collection=collection,
                source_group=world.group_id,
                target_group=target_group,
            )
            for collection in ("profiles", "things")
        ]

        profiles = await target.get(f"/groups/{target_group}/profiles")
        listed = await target.get(f"/groups/{target_group}/things")
        assert all(size > 0 for size in copied)
        assert [profile["id"] for profile in profiles.json()["profiles"]] == [
            world.profile_id
        ]
        assert profiles.json()["profiles"][0]["group_id"] == target_group
        assert [thing["id"] for thing in listed.json()["things"]] == [
            thing["id"] for thing in things
        ]
        identified = await target.post(
            "/identify", headers={"Authorization": "External ext-meter"}
        )
        assert identified.status_code == 200
        assert identified.json()["id"] == things[1]["id"]

    async def test_empty_group_transfers_nothing(self, client, world, target) -> None:
        _, target_group = await _target_group(target)
        client.headers.update(auth(world.owner_token))

        size = await transfer(
            client,
            target,
            collection="things",
            source_group=world.group_id,
            target_group=target_group,
        )

        assert size == 0
