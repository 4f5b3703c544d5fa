"""Group membership routes."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.paging import PageMetadata
from app.projection import page_fields
from app.requests.memberships import (
    GroupMembershipsReq,
    ListMembershipsReq,
    RemoveMembershipsReq,
)
from app.routers.dependencies import (
    bearer_token,
    commit_session,
    membership_page_query,
    require_json,
)
from app.schemas.memberships import (
    GroupMembershipsBody,
    MembershipsPageResponse,
    RemoveMembershipsBody,
)
from app.services import memberships as service
from app.services.identity import identify

router = APIRouter(prefix="/groups/{group_id}/memberships", tags=["memberships"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_json)],
)
async def create_memberships(
    group_id: str,
    payload: GroupMembershipsBody,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Grant roles in a group.

    Parameters
    ----------
    group_id : str
        Group identifier.
    payload : GroupMembershipsBody
        Members and roles; ``owner`` is rejected.
    token : str
        Bearer token.
    session : AsyncSession
        Active database session.

    Returns
    -------
    Response
        Empty ``201`` response.
    """
    req = GroupMembershipsReq(
        token=token, group_id=group_id, memberships=tuple(payload.group_memberships)
    )
    req.validate()
    caller = await identify(session, req.token)
    await service.create_memberships(session, caller, req.group_id, req.memberships)
    await commit_session(session)
    return Response(status_code=status.HTTP_201_CREATED)


@router.put("", dependencies=[Depends(require_json)])
async def update_memberships(
    group_id: str,
    payload: GroupMembershipsBody,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Change the roles of existing members."""
    req = GroupMembershipsReq(
        token=token, group_id=group_id, memberships=tuple(payload.group_memberships)
    )
    req.validate()
    caller = await identify(session, req.token)
    await service.update_memberships(session, caller, req.group_id, req.memberships)
    await commit_session(session)
    return Response(status_code=status.HTTP_200_OK)


@router.patch(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_json)],
)
async def remove_memberships(
    group_id: str,
    payload: RemoveMembershipsBody,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    req = RemoveMembershipsReq(
        token=token, group_id=group_id, member_ids=tuple(payload.member_ids)
    )
    req.validate()
    caller = await identify(session, req.token)
    await service.remove_memberships(session, caller, req.group_id, req.member_ids)
    await commit_session(session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=MembershipsPageResponse, response_model_exclude_none=True)
async def list_memberships(
    group_id: str,
    page: PageMetadata = Depends(membership_page_query),
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> MembershipsPageResponse:
    """List a group's members, its owner included."""
    req = ListMembershipsReq(token=token, group_id=group_id, page=page)
    req.validate()
    caller = await identify(session, req.token)
    result = await service.list_memberships(session, caller, req.group_id, req.page)
    return MembershipsPageResponse(
        **page_fields(req.page, result.total),
        email=req.page.email or None,
        group_memberships=result.items,
    )
