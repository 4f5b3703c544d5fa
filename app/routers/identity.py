"""Bootstrap, user and organization routes."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import get_session
from app.errors import ForbiddenError
from app.models.user import AccessToken, User
from app.requests.common import require_id, require_token
from app.routers.dependencies import bearer_token, commit_session, require_json
from app.schemas.common import TokenResponse
from app.schemas.identity import (
    BootstrapRequest,
    OrgCreateRequest,
    OrgMembersRequest,
    OrgResponse,
    UserCreateRequest,
    UserTokenResponse,
)
from app.services.identity import bootstrap_admin, create_user, identify
from app.services.orgs import add_org_members, create_org
from app.services.security import IssuedToken

router = APIRouter(tags=["identity"])


def _user_token_response(
    user: User, access_token: AccessToken, issued: IssuedToken
) -> UserTokenResponse:
    return UserTokenResponse(
        user_id=user.id,
        email=user.email,
        is_admin=user.is_admin,
        token=TokenResponse(
            id=access_token.id, token=issued.plaintext, name=access_token.name
        ),
    )


@router.post(
    "/bootstrap",
    response_model=UserTokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_json)],
)
async def bootstrap(
    payload: BootstrapRequest,
    session: AsyncSession = Depends(get_session),
) -> UserTokenResponse:
    """Create the first platform administrator and its token.

    Parameters
    ----------
    payload : BootstrapRequest
        Bootstrap request.
    session : AsyncSession
        Active database session.

    Returns
    -------
    UserTokenResponse
        Created administrator and its one-time token.
    """
    if not get_settings().bootstrap_enabled:
        raise ForbiddenError("bootstrap disabled")
    created = await bootstrap_admin(
        session, email=payload.email, token_name=payload.token_name
    )
    await commit_session(session)
    return _user_token_response(*created)


@router.post(
    "/users",
    response_model=UserTokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_json)],
)
async def create_platform_user(
    payload: UserCreateRequest,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> UserTokenResponse:
    """Create a user and return its one-time token."""
    require_token(token)
    caller = await identify(session, token)
    created = await create_user(
        session,
        caller,
        email=payload.email,
        is_admin=payload.is_admin,
        token_name=payload.token_name,
    )
    await commit_session(session)
    return _user_token_response(*created)


@router.post(
    "/orgs",
    response_model=OrgResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_json)],
)
async def create_organization(
    payload: OrgCreateRequest,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> OrgResponse:
    """Create an organization owned by the caller."""
    require_token(token)
    caller = await identify(session, token)
    org = await create_org(session, caller, name=payload.name)
    await commit_session(session)
    return OrgResponse.model_validate(org)


@router.post(
    "/orgs/{org_id}/members",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_json)],
)
async def add_organization_members(
    org_id: str,
    payload: OrgMembersRequest,
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Add members to an organization."""
    require_token(token)
    require_id(org_id, "org")
    caller = await identify(session, token)
    await add_org_members(session, caller, org_id=org_id, members=payload.members)
    await commit_session(session)
    return Response(status_code=status.HTTP_201_CREATED)
