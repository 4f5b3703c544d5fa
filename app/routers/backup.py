"""Backup and restore routes.

Scoped exports are served as JSON file attachments and their restore
counterparts accept the same bytes back as ``application/octet-stream``.
The platform pair exchanges the full document as plain JSON.
"""

from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.requests.backup import (
    GROUP_MEMBERSHIPS,
    PROFILES,
    THINGS,
    BackupByScopeReq,
    BackupReq,
    RestoreReq,
)
from app.requests.common import require_token
from app.routers.dependencies import bearer_token, commit_session
from app.schemas.backup import (
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_OCTET_STREAM,
    BackupDocument,
    decode_backup,
)
from app.services import backup as exports
from app.services import restore as imports
from app.services.identity import Caller, identify

router = APIRouter(tags=["backup"])

Exporter = Callable[[AsyncSession, Caller, str], Awaitable[BackupDocument]]

EXPORT_FILENAMES = {
    THINGS: "things-backup-{id}.json",
    PROFILES: "profiles-backup-{id}.json",
    GROUP_MEMBERSHIPS: "group-memberships-backup-{id}.json",
}


async def _scoped_backup(
    session: AsyncSession,
    token: str,
    *,
    scope: str,
    scope_id: str,
    collection: str,
    exporter: Exporter,
) -> Response:
    req = BackupByScopeReq(token=token, scope=scope, scope_id=scope_id)
    req.validate()
    caller = await identify(session, req.token)
    document = await exporter(session, caller, req.scope_id)
    filename = EXPORT_FILENAMES[collection].format(id=req.scope_id)
    return Response(
        content=document.to_bytes(collection),
        media_type=CONTENT_TYPE_OCTET_STREAM,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


async def _scoped_restore(
    request: Request,
    session: AsyncSession,
    token: str,
    *,
    scope: str,
    scope_id: str,
    collection: str,
) -> Response:
    require_token(token)
    document = decode_backup(
        request.headers.get("content-type"),
        await request.body(),
        expected=CONTENT_TYPE_OCTET_STREAM,
    )
    req = RestoreReq(
        token=token,
        document=document,
        collections=(collection,),
        scope=scope,
        scope_id=scope_id,
    )
    req.validate()
    caller = await identify(session, req.token)
    if scope == "group":
        await imports.restore_by_group(session, caller, req.scope_id, document, collection)
    else:
        await imports.restore_by_org(session, caller, req.scope_id, document, collection)
    await commit_session(session)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/groups/{group_id}/things/backup")
async def backup_things_by_group(
    group_id: str,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Download every thing of a group."""
    return await _scoped_backup(
        session,
        token,
        scope="group",
        scope_id=group_id,
        collection=THINGS,
        exporter=exports.backup_things_by_group,
    )


@router.get("/orgs/{org_id}/things/backup")
async def backup_things_by_org(
    org_id: str,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Download every thing of an organization."""
    return await _scoped_backup(
        session,
        token,
        scope="org",
        scope_id=org_id,
        collection=THINGS,
        exporter=exports.backup_things_by_org,
    )


@router.get("/groups/{group_id}/profiles/backup")
async def backup_profiles_by_group(
    group_id: str,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    return await _scoped_backup(
        session,
        token,
        scope="group",
        scope_id=group_id,
        collection=PROFILES,
        exporter=exports.backup_profiles_by_group,
    )


@router.get("/orgs/{org_id}/profiles/backup")
async def backup_profiles_by_org(
    org_id: str,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    return await _scoped_backup(
        session,
        token,
        scope="org",
        scope_id=org_id,
        collection=PROFILES,
        exporter=exports.backup_profiles_by_org,
    )


@router.get("/groups/{group_id}/memberships/backup")
async def backup_memberships_by_group(
    group_id: str,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Download the stored memberships of a group."""
    return await _scoped_backup(
        session,
        token,
        scope="group",
        scope_id=group_id,
        collection=GROUP_MEMBERSHIPS,
        exporter=exports.backup_memberships_by_group,
    )


@router.post("/groups/{group_id}/things/restore", status_code=status.HTTP_201_CREATED)
async def restore_things_by_group(
    group_id: str,
    request: Request,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    return await _scoped_restore(
        request, session, token, scope="group", scope_id=group_id, collection=THINGS
    )


@router.post("/orgs/{org_id}/things/restore", status_code=status.HTTP_201_CREATED)
async def restore_things_by_org(
    org_id: str,
    request: Request,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    return await _scoped_restore(
        request, session, token, scope="org", scope_id=org_id, collection=THINGS
    )


@router.post("/groups/{group_id}/profiles/restore", status_code=status.HTTP_201_CREATED)
async def restore_profiles_by_group(
    group_id: str,
    request: Request,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    return await _scoped_restore(
        request, session, token, scope="group", scope_id=group_id, collection=PROFILES
    )


@router.post("/orgs/{org_id}/profiles/restore", status_code=status.HTTP_201_CREATED)
async def restore_profiles_by_org(
    org_id: str,
    request: Request,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    return await _scoped_restore(
        request, session, token, scope="org", scope_id=org_id, collection=PROFILES
    )


@router.post(
    "/groups/{group_id}/memberships/restore", status_code=status.HTTP_201_CREATED
)
async def restore_memberships_by_group(
    group_id: str,
    request: Request,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    return await _scoped_restore(
        request,
        session,
        token,
        scope="group",
        scope_id=group_id,
        collection=GROUP_MEMBERSHIPS,
    )


@router.get("/backup")
async def backup_platform(
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Export the whole platform as one JSON document."""
    req = BackupReq(token=token)
    req.validate()
    caller = await identify(session, req.token)
    document = await exports.backup_platform(session, caller)
    return document.dump()


@router.post("/restore", status_code=status.HTTP_201_CREATED)
async def restore_platform(
    request: Request,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Restore a platform export.

    Parameters
    ----------
    request : Request
        Incoming request carrying a JSON backup document.
    token : str
        Bearer token of a platform administrator.
    session : AsyncSession
        Active database session.

    Returns
    -------
    Response
        Empty ``201`` response once every collection applied.
    """
    require_token(token)
    document = decode_backup(
        request.headers.get("content-type"),
        await request.body(),
        expected=CONTENT_TYPE_JSON,
    )
    req = RestoreReq(token=token, document=document)
    req.validate()
    caller = await identify(session, req.token)
    await imports.restore_platform(session, caller, document)
    await commit_session(session)
    return Response(status_code=status.HTTP_201_CREATED)
