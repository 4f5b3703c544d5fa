"""Pytest fixtures."""

from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import get_settings
from app.database import build_engine, create_schema, get_session
from app.main import app


def auth(token: str) -> dict[str, str]:
    """Build bearer authorization headers.

    Parameters
    ----------
    token : str
        Raw bearer token.

    Returns
    -------
    dict[str, str]
        Request headers.
    """
    return {"Authorization": f"Bearer {token}"}


@dataclass(slots=True)
class World:
    """Seeded tenant used by most API tests.

    Attributes
    ----------
    admin_token : str
        Platform administrator token.
    owner_id, owner_token : str
        Owner of ``org_id`` and creator of ``group_id``.
    member_id, member_token : str
        Viewer member of ``org_id``.
    outsider_id, outsider_token : str
        User without any relation to the tenant.
    org_id, group_id, profile_id : str
        Seeded organization, group and profile.
    """

    admin_token: str
    owner_id: str
    owner_token: str
    member_id: str
    member_token: str
    outsider_id: str
    outsider_token: str
    org_id: str
    group_id: str
    profile_id: str


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    """Reset cached settings around each test.

    Yields
    ------
    None
        Runs the test with fresh settings.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
async def client(tmp_path: Path) -> AsyncIterator[AsyncClient]:
    """Create a test HTTP client backed by SQLite.

    Parameters
    ----------
    tmp_path : Path
        Temporary directory for test database.

    Yields
    ------
    AsyncClient
        Configured test client.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    session_factory = async_sessionmaker(
        engine,
        expire_on_commit=False,
        class_=AsyncSession,
    )
    await create_schema(engine)

    async def _override_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://testserver",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    await engine.dispose()


async def create_user(client: AsyncClient, admin_token: str, email: str) -> tuple[str, str]:
    """Create a user through the API and return its id and token."""
    response = await client.post(
        "/users", headers=auth(admin_token), json={"email": email}
    )
    assert response.status_code == 201, response.text
    payload = response.json()
    return payload["user_id"], payload["token"]["token"]


async def create_things(
    client: AsyncClient, token: str, profile_id: str, things: list[dict]
) -> list[dict]:
    response = await client.post(
        f"/profiles/{profile_id}/things", headers=auth(token), json={"things": things}
    )
    assert response.status_code == 201, response.text
    return response.json()["things"]


@pytest.fixture()
async def world(client: AsyncClient) -> World:
    """Seed an organization with a group, a profile and three users.

    Parameters
    ----------
    client : AsyncClient
        Test HTTP client.

    Returns
    -------
    World
        Identifiers and tokens of the seeded tenant.
    """
    bootstrap = await client.post(
        "/bootstrap", json={"email": "admin@example.com", "token_name": "root"}
    )
    assert bootstrap.status_code == 201, bootstrap.text
    admin_token = bootstrap.json()["token"]["token"]

    owner_id, owner_token = await create_user(client, admin_token, "owner@example.com")
    member_id, member_token = await create_user(client, admin_token, "member@example.com")
    outsider_id, outsider_token = await create_user(
        client, admin_token, "outsider@example.com"
    )

    org = await client.post("/orgs", headers=auth(owner_token), json={"name": "Acme"})
    assert org.status_code == 201, org.text
    org_id = org.json()["id"]
    members = await client.post(
        f"/orgs/{org_id}/members",
        headers=auth(owner_token),
        json={"members": [{"member_id": member_id, "role": "viewer"}]},
    )
    assert members.status_code == 201, members.text

    groups = await client.post(
        f"/orgs/{org_id}/groups",
        headers=auth(owner_token),
        json={"groups": [{"name": "plant-a"}]},
    )
    assert groups.status_code == 201, groups.text
    group_id = groups.json()["groups"][0]["id"]

    profiles = await client.post(
        f"/groups/{group_id}/profiles",
        headers=auth(owner_token),
        json={"profiles": [{"name": "sensor", "config": {"interval": 30}}]},
    )
    assert profiles.status_code == 201, profiles.text
    profile_id = profiles.json()["profiles"][0]["id"]

    return World(
        admin_token=admin_token,
        owner_id=owner_id,
        owner_token=owner_token,
        member_id=member_id,
        member_token=member_token,
        outsider_id=outsider_id,
        outsider_token=outsider_token,
        org_id=org_id,
        group_id=group_id,
        profile_id=profile_id,
    )
