"""Copy a group's profiles and things from one deployment to another.

Profiles are restored into the target group whatever group they came from;
things follow their profiles. Entity ids and thing keys are kept, so a copy
inside a single deployment is refused with 409 while the originals exist.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass

import anyio
import httpx

OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class Endpoint:
    """One side of a transfer.

    Attributes
    ----------
    base_url : str
        Service base URL.
    token : str
        Bearer token with admin rights on the group.
    group_id : str
        Group to export from or restore into.
    """

    base_url: str
    token: str
    group_id: str


def _endpoint(prefix: str) -> Endpoint:
    values = {
        name: os.environ.get(f"{prefix}_{name.upper()}", "")
        for name in ("base_url", "token", "group_id")
    }
    missing = [name for name, value in values.items() if not value]
    if missing:
        names = ", ".join(f"{prefix}_{name.upper()}" for name in missing)
        raise SystemExit(f"{names} required")
    return Endpoint(**values)


async def transfer(
    source: httpx.AsyncClient,
    target: httpx.AsyncClient,
    *,
    collection: str,
    source_group: str,
    target_group: str,
) -> int:
    """Move one collection between groups.

    Parameters
    ----------
    source : httpx.AsyncClient
        Client authenticated against the source deployment.
    target : httpx.AsyncClient
        Client authenticated against the target deployment.
    collection : str
        ``profiles`` or ``things``.
    source_group : str
        Group exported from.
    target_group : str
        Group restored into.

    Returns
    -------
    int
        Size of the transferred document in bytes; zero when the source
        group holds nothing of that kind.
    """
    response = await source.get(f"/groups/{source_group}/{collection}/backup")
    response.raise_for_status()
    records = response.json().get(collection, [])
    if not records:
        return 0
    if collection == "profiles":
        # An empty group id makes the restore place the profile in the
        # target group.
        for record in records:
            record.pop("group_id", None)
    document = json.dumps({collection: records}).encode()

    restore = await target.post(
        f"/groups/{target_group}/{collection}/restore",
        content=document,
        headers={"Content-Type": OCTET_STREAM},
    )
    restore.raise_for_status()
    return len(document)


async def main() -> None:
    """Transfer profiles, then things, between the configured groups.

    Returns
    -------
    None
        Prints a short summary per collection.
    """
    source = _endpoint("DEVICEGRAPH_SOURCE")
    target = _endpoint("DEVICEGRAPH_TARGET")

    async with (
        httpx.AsyncClient(
            base_url=source.base_url,
            headers={"Authorization": f"Bearer {source.token}"},
            timeout=30.0,
        ) as source_client,
        httpx.AsyncClient(
            base_url=target.base_url,
            headers={"Authorization": f"Bearer {target.token}"},
            timeout=30.0,
        ) as target_client,
    ):
        for collection in ("profiles", "things"):
            size = await transfer(
                source_client,
                target_client,
                collection=collection,
                source_group=source.group_id,
                target_group=target.group_id,
            )
            print(f"transferred {collection}: {size} bytes")


if __name__ == "__main__":
    anyio.run(main)
