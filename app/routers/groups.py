"""Group routes."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.paging import PageMetadata
from app.projection import page_fields, view_group
from app.requests.common import ListByScopeReq, ListReq, RemoveReq, ResourceReq
from app.requests.groups import CreateGroupsReq, UpdateGroupReq
from app.routers.dependencies import (
    bearer_token,
    commit_session,
    page_query,
    require_json,
    search_page,
)
from app.schemas.groups import (
    CreateGroupsBody,
    GroupRecord,
    GroupsPageResponse,
    GroupsResponse,
    GroupUpdate,
    RemoveGroupsBody,
)
from app.services import groups as service
from app.services.identity import identify

router = APIRouter(tags=["groups"])


@router.post(
    "/orgs/{org_id}/groups",
    response_model=GroupsResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_json)],
)
async def create_groups(
    org_id: str,
    payload: CreateGroupsBody,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> GroupsResponse:
    """Create groups in an organization.

    Parameters
    ----------
    org_id : str
        Organization identifier.
    payload : CreateGroupsBody
        Groups to create.
    token : str
        Bearer token.
    session : AsyncSession
        Active database session.

    Returns
    -------
    GroupsResponse
        Created groups in request order.
    """
    req = CreateGroupsReq(token=token, org_id=org_id, groups=tuple(payload.groups))
    req.validate()
    caller = await identify(session, req.token)
    groups = await service.create_groups(session, caller, req)
    await commit_session(session)
    return GroupsResponse(groups=[view_group(group) for group in groups])


async def _list_groups(
    session: AsyncSession, token: str, page: PageMetadata
) -> GroupsPageResponse:
    req = ListReq(token=token, page=page)
    req.validate()
    caller = await identify(session, req.token)
    result = await service.list_groups(session, caller, req.page)
    return GroupsPageResponse(
        **page_fields(req.page, result.total),
        groups=[view_group(group) for group in result.items],
    )


@router.get("/groups", response_model=GroupsPageResponse, response_model_exclude_none=True)
async def list_groups(
    page: PageMetadata = Depends(page_query),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> GroupsPageResponse:
    """List groups visible to the caller."""
    return await _list_groups(session, token, page)


@router.post(
    "/groups/search",
    response_model=GroupsPageResponse,
    response_model_exclude_none=True,
)
async def search_groups(
    page: PageMetadata = Depends(search_page),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> GroupsPageResponse:
    return await _list_groups(session, token, page)


async def _list_groups_by_org(
    session: AsyncSession, token: str, org_id: str, page: PageMetadata
) -> GroupsPageResponse:
    req = ListByScopeReq(token=token, scope="org", scope_id=org_id, page=page)
    req.validate()
    caller = await identify(session, req.token)
    result = await service.list_groups_by_org(session, caller, req.scope_id, req.page)
    return GroupsPageResponse(
        **page_fields(req.page, result.total),
        groups=[view_group(group) for group in result.items],
    )


@router.get(
    "/orgs/{org_id}/groups",
    response_model=GroupsPageResponse,
    response_model_exclude_none=True,
)
async def list_groups_by_org(
    org_id: str,
    page: PageMetadata = Depends(page_query),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> GroupsPageResponse:
    """List the groups of an organization."""
    return await _list_groups_by_org(session, token, org_id, page)


@router.post(
    "/orgs/{org_id}/groups/search",
    response_model=GroupsPageResponse,
    response_model_exclude_none=True,
)
async def search_groups_by_org(
    org_id: str,
    page: PageMetadata = Depends(search_page),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> GroupsPageResponse:
    return await _list_groups_by_org(session, token, org_id, page)


@router.get("/groups/{group_id}", response_model=GroupRecord, response_model_exclude_none=True)
async def view_group_route(
    group_id: str,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> GroupRecord:
    req = ResourceReq(token=token, entity="group", id=group_id)
    req.validate()
    caller = await identify(session, req.token)
    return view_group(await service.view_group(session, caller, req.id))


@router.put(
    "/groups/{group_id}",
    response_model=GroupRecord,
    response_model_exclude_none=True,
    dependencies=[Depends(require_json)],
)
async def update_group(
    group_id: str,
    payload: GroupUpdate,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> GroupRecord:
    """Replace a group's name, description and metadata."""
    req = UpdateGroupReq(
        token=token,
        id=group_id,
        name=payload.name,
        description=payload.description,
        metadata=payload.metadata,
    )
    req.validate()
    caller = await identify(session, req.token)
    group = await service.update_group(session, caller, req)
    await commit_session(session)
    return view_group(group)


@router.delete("/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_group(
    group_id: str,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    req = RemoveReq(token=token, entity="group", ids=(group_id,))
    req.validate()
    caller = await identify(session, req.token)
    await service.remove_groups(session, caller, req.ids)
    await commit_session(session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/groups",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_json)],
)
async def remove_groups(
    payload: RemoveGroupsBody,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Remove several groups at once."""
    req = RemoveReq(token=token, entity="group", ids=tuple(payload.group_ids))
    req.validate()
    caller = await identify(session, req.token)
    await service.remove_groups(session, caller, req.ids)
    await commit_session(session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
