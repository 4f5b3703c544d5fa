"""Thing routes, including device identity."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.paging import PageMetadata
from app.projection import page_fields, view_thing
from app.requests.common import ListByScopeReq, ListReq, RemoveReq, ResourceReq
from app.requests.things import (
    CreateThingsReq,
    ThingKeyReq,
    UpdateExternalKeyReq,
    UpdateThingProfileReq,
    UpdateThingReq,
)
from app.routers.dependencies import (
    bearer_token,
    commit_session,
    page_query,
    require_json,
    search_page,
    thing_key,
)
from app.schemas.things import (
    CreateThingsBody,
    ExternalKeyUpdate,
    IdentityResponse,
    RemoveThingsBody,
    ThingMetadataResponse,
    ThingProfileUpdate,
    ThingRecord,
    ThingsPageResponse,
    ThingsResponse,
    ThingUpdate,
)
from app.services import things as service
from app.services.identity import identify

router = APIRouter(tags=["things"])

SCOPED_LISTINGS = {
    "group": service.list_things_by_group,
    "profile": service.list_things_by_profile,
    "org": service.list_things_by_org,
}


@router.post(
    "/profiles/{profile_id}/things",
    response_model=ThingsResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_json)],
)
async def create_things(
    profile_id: str,
    payload: CreateThingsBody,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingsResponse:
    """Create things from a profile.

    Parameters
    ----------
    profile_id : str
        Profile identifier; the things join its group.
    payload : CreateThingsBody
        Things to create.
    token : str
        Bearer token.
    session : AsyncSession
        Active database session.

    Returns
    -------
    ThingsResponse
        Created things, including generated keys.
    """
    req = CreateThingsReq(token=token, profile_id=profile_id, things=tuple(payload.things))
    req.validate()
    caller = await identify(session, req.token)
    things = await service.create_things(session, caller, req)
    await commit_session(session)
    return ThingsResponse(things=[view_thing(thing) for thing in things])


async def _list_things(
    session: AsyncSession, token: str, page: PageMetadata
) -> ThingsPageResponse:
    req = ListReq(token=token, page=page)
    req.validate()
    caller = await identify(session, req.token)
    result = await service.list_things(session, caller, req.page)
    return ThingsPageResponse(
        **page_fields(req.page, result.total),
        things=[view_thing(thing) for thing in result.items],
    )


async def _list_things_by_scope(
    session: AsyncSession, token: str, scope: str, scope_id: str, page: PageMetadata
) -> ThingsPageResponse:
    req = ListByScopeReq(token=token, scope=scope, scope_id=scope_id, page=page)
    req.validate()
    caller = await identify(session, req.token)
    result = await SCOPED_LISTINGS[scope](session, caller, req.scope_id, req.page)
    return ThingsPageResponse(
        **page_fields(req.page, result.total),
        things=[view_thing(thing) for thing in result.items],
    )


@router.get("/things", response_model=ThingsPageResponse, response_model_exclude_none=True)
async def list_things(
    page: PageMetadata = Depends(page_query),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingsPageResponse:
    """List things visible to the caller."""
    return await _list_things(session, token, page)


@router.post(
    "/things/search", response_model=ThingsPageResponse, response_model_exclude_none=True
)
async def search_things(
    page: PageMetadata = Depends(search_page),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingsPageResponse:
    return await _list_things(session, token, page)


@router.get(
    "/groups/{group_id}/things",
    response_model=ThingsPageResponse,
    response_model_exclude_none=True,
)
async def list_things_by_group(
    group_id: str,
    page: PageMetadata = Depends(page_query),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingsPageResponse:
    return await _list_things_by_scope(session, token, "group", group_id, page)


@router.post(
    "/groups/{group_id}/things/search",
    response_model=ThingsPageResponse,
    response_model_exclude_none=True,
)
async def search_things_by_group(
    group_id: str,
    page: PageMetadata = Depends(search_page),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingsPageResponse:
    return await _list_things_by_scope(session, token, "group", group_id, page)


@router.get(
    "/profiles/{profile_id}/things",
    response_model=ThingsPageResponse,
    response_model_exclude_none=True,
)
async def list_things_by_profile(
    profile_id: str,
    page: PageMetadata = Depends(page_query),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingsPageResponse:
    return await _list_things_by_scope(session, token, "profile", profile_id, page)


@router.post(
    "/profiles/{profile_id}/things/search",
    response_model=ThingsPageResponse,
    response_model_exclude_none=True,
)
async def search_things_by_profile(
    profile_id: str,
    page: PageMetadata = Depends(search_page),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingsPageResponse:
    return await _list_things_by_scope(session, token, "profile", profile_id, page)


@router.get(
    "/orgs/{org_id}/things",
    response_model=ThingsPageResponse,
    response_model_exclude_none=True,
)
async def list_things_by_org(
    org_id: str,
    page: PageMetadata = Depends(page_query),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingsPageResponse:
    return await _list_things_by_scope(session, token, "org", org_id, page)


@router.post(
    "/orgs/{org_id}/things/search",
    response_model=ThingsPageResponse,
    response_model_exclude_none=True,
)
async def search_things_by_org(
    org_id: str,
    page: PageMetadata = Depends(search_page),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingsPageResponse:
    return await _list_things_by_scope(session, token, "org", org_id, page)


@router.get("/things/{thing_id}", response_model=ThingRecord, response_model_exclude_none=True)
async def view_thing_route(
    thing_id: str,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingRecord:
    req = ResourceReq(token=token, entity="thing", id=thing_id)
    req.validate()
    caller = await identify(session, req.token)
    return view_thing(await service.view_thing(session, caller, req.id))


@router.put(
    "/things/{thing_id}",
    response_model=ThingRecord,
    response_model_exclude_none=True,
    dependencies=[Depends(require_json)],
)
async def update_thing(
    thing_id: str,
    payload: ThingUpdate,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingRecord:
    """Replace a thing's name, key and metadata."""
    req = UpdateThingReq(
        token=token,
        id=thing_id,
        name=payload.name,
        key=payload.key,
        metadata=payload.metadata,
    )
    req.validate()
    caller = await identify(session, req.token)
    thing = await service.update_thing(session, caller, req)
    await commit_session(session)
    return view_thing(thing)


@router.put(
    "/things/{thing_id}/profile",
    response_model=ThingRecord,
    response_model_exclude_none=True,
    dependencies=[Depends(require_json)],
)
async def update_thing_profile(
    thing_id: str,
    payload: ThingProfileUpdate,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingRecord:
    """Move a thing to another profile and group."""
    req = UpdateThingProfileReq(
        token=token,
        id=thing_id,
        profile_id=payload.profile_id,
        group_id=payload.group_id,
    )
    req.validate()
    caller = await identify(session, req.token)
    thing = await service.update_thing_profile(session, caller, req)
    await commit_session(session)
    return view_thing(thing)


@router.patch(
    "/things/{thing_id}/external-key",
    response_model=ThingRecord,
    response_model_exclude_none=True,
    dependencies=[Depends(require_json)],
)
async def update_external_key(
    thing_id: str,
    payload: ExternalKeyUpdate,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ThingRecord:
    req = UpdateExternalKeyReq(token=token, id=thing_id, key=payload.key)
    req.validate()
    caller = await identify(session, req.token)
    thing = await service.update_external_key(session, caller, req)
    await commit_session(session)
    return view_thing(thing)


@router.delete("/things/{thing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_thing(
    thing_id: str,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    req = RemoveReq(token=token, entity="thing", ids=(thing_id,))
    req.validate()
    caller = await identify(session, req.token)
    await service.remove_things(session, caller, req.ids)
    await commit_session(session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/things",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_json)],
)
async def remove_things(
    payload: RemoveThingsBody,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Remove several things at once."""
    req = RemoveReq(token=token, entity="thing", ids=tuple(payload.thing_ids))
    req.validate()
    caller = await identify(session, req.token)
    await service.remove_things(session, caller, req.ids)
    await commit_session(session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/identify", response_model=IdentityResponse)
async def identify_thing(
    req: ThingKeyReq = Depends(thing_key),
    session: AsyncSession = Depends(get_session),
) -> IdentityResponse:
    """Return the id of the thing holding the presented key."""
    req.validate()
    thing = await service.identify_thing(session, req)
    return IdentityResponse(id=thing.id)


@router.get("/metadata", response_model=ThingMetadataResponse)
async def thing_metadata(
    req: ThingKeyReq = Depends(thing_key),
    session: AsyncSession = Depends(get_session),
) -> ThingMetadataResponse:
    """Return the metadata of the thing holding the presented key."""
    req.validate()
    thing = await service.identify_thing(session, req)
    return ThingMetadataResponse(metadata=thing.thing_metadata or {})
