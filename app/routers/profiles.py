"""Profile routes."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.paging import PageMetadata
from app.projection import page_fields, view_profile
from app.requests.common import ListByScopeReq, ListReq, RemoveReq, ResourceReq
from app.requests.profiles import CreateProfilesReq, UpdateProfileReq
from app.routers.dependencies import (
    bearer_token,
    commit_session,
    page_query,
    require_json,
    search_page,
)
from app.schemas.profiles import (
    CreateProfilesBody,
    ProfileRecord,
    ProfilesPageResponse,
    ProfilesResponse,
    ProfileUpdate,
    RemoveProfilesBody,
)
from app.services import profiles as service
from app.services.identity import identify

router = APIRouter(tags=["profiles"])

SCOPED_LISTINGS = {
    "group": service.list_profiles_by_group,
    "org": service.list_profiles_by_org,
}


@router.post(
    "/groups/{group_id}/profiles",
    response_model=ProfilesResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_json)],
)
async def create_profiles(
    group_id: str,
    payload: CreateProfilesBody,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ProfilesResponse:
    """Create profiles in a group."""
    req = CreateProfilesReq(
        token=token, group_id=group_id, profiles=tuple(payload.profiles)
    )
    req.validate()
    caller = await identify(session, req.token)
    profiles = await service.create_profiles(session, caller, req)
    await commit_session(session)
    return ProfilesResponse(profiles=[view_profile(profile) for profile in profiles])


async def _list_profiles(
    session: AsyncSession, token: str, page: PageMetadata
) -> ProfilesPageResponse:
    req = ListReq(token=token, page=page)
    req.validate()
    caller = await identify(session, req.token)
    result = await service.list_profiles(session, caller, req.page)
    return ProfilesPageResponse(
        **page_fields(req.page, result.total),
        profiles=[view_profile(profile) for profile in result.items],
    )


async def _list_profiles_by_scope(
    session: AsyncSession, token: str, scope: str, scope_id: str, page: PageMetadata
) -> ProfilesPageResponse:
    req = ListByScopeReq(token=token, scope=scope, scope_id=scope_id, page=page)
    req.validate()
    caller = await identify(session, req.token)
    result = await SCOPED_LISTINGS[scope](session, caller, req.scope_id, req.page)
    return ProfilesPageResponse(
        **page_fields(req.page, result.total),
        profiles=[view_profile(profile) for profile in result.items],
    )


@router.get(
    "/profiles", response_model=ProfilesPageResponse, response_model_exclude_none=True
)
async def list_profiles(
    page: PageMetadata = Depends(page_query),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ProfilesPageResponse:
    """List profiles visible to the caller."""
    return await _list_profiles(session, token, page)


@router.post(
    "/profiles/search",
    response_model=ProfilesPageResponse,
    response_model_exclude_none=True,
)
async def search_profiles(
    page: PageMetadata = Depends(search_page),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ProfilesPageResponse:
    return await _list_profiles(session, token, page)


@router.get(
    "/groups/{group_id}/profiles",
    response_model=ProfilesPageResponse,
    response_model_exclude_none=True,
)
async def list_profiles_by_group(
    group_id: str,
    page: PageMetadata = Depends(page_query),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ProfilesPageResponse:
    return await _list_profiles_by_scope(session, token, "group", group_id, page)


@router.post(
    "/groups/{group_id}/profiles/search",
    response_model=ProfilesPageResponse,
    response_model_exclude_none=True,
)
async def search_profiles_by_group(
    group_id: str,
    page: PageMetadata = Depends(search_page),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ProfilesPageResponse:
    return await _list_profiles_by_scope(session, token, "group", group_id, page)


@router.get(
    "/orgs/{org_id}/profiles",
    response_model=ProfilesPageResponse,
    response_model_exclude_none=True,
)
async def list_profiles_by_org(
    org_id: str,
    page: PageMetadata = Depends(page_query),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ProfilesPageResponse:
    return await _list_profiles_by_scope(session, token, "org", org_id, page)


@router.post(
    "/orgs/{org_id}/profiles/search",
    response_model=ProfilesPageResponse,
    response_model_exclude_none=True,
)
async def search_profiles_by_org(
    org_id: str,
    page: PageMetadata = Depends(search_page),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ProfilesPageResponse:
    return await _list_profiles_by_scope(session, token, "org", org_id, page)


@router.get("/profiles/{profile_id}", response_model=ProfileRecord)
async def view_profile_route(
    profile_id: str,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ProfileRecord:
    req = ResourceReq(token=token, entity="profile", id=profile_id)
    req.validate()
    caller = await identify(session, req.token)
    return view_profile(await service.view_profile(session, caller, req.id))


@router.put(
    "/profiles/{profile_id}",
    response_model=ProfileRecord,
    dependencies=[Depends(require_json)],
)
async def update_profile(
    profile_id: str,
    payload: ProfileUpdate,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> ProfileRecord:
    """Replace a profile's name, config and metadata."""
    req = UpdateProfileReq(
        token=token,
        id=profile_id,
        name=payload.name,
        config=payload.config,
        metadata=payload.metadata,
    )
    req.validate()
    caller = await identify(session, req.token)
    profile = await service.update_profile(session, caller, req)
    await commit_session(session)
    return view_profile(profile)


@router.delete("/profiles/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_profile(
    profile_id: str,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    req = RemoveReq(token=token, entity="profile", ids=(profile_id,))
    req.validate()
    caller = await identify(session, req.token)
    await service.remove_profiles(session, caller, req.ids)
    await commit_session(session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/profiles",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_json)],
)
async def remove_profiles(
    payload: RemoveProfilesBody,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Remove several profiles at once."""
    req = RemoveReq(token=token, entity="profile", ids=tuple(payload.profile_ids))
    req.validate()
    caller = await identify(session, req.token)
    await service.remove_profiles(session, caller, req.ids)
    await commit_session(session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
