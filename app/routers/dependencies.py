"""Shared router helpers and request decoding dependencies."""

from fastapi import Body, Depends, Header, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.errors import ConflictError, UnsupportedMediaTypeError
from app.paging import PageMetadata, build_page_metadata
from app.requests.things import EXTERNAL_KEY, INTERNAL_KEY, ThingKeyReq
from app.schemas.backup import CONTENT_TYPE_JSON
from app.schemas.common import SearchRequest

bearer_scheme = HTTPBearer(auto_error=False)

THING_KEY_SCHEMES = {"thing": INTERNAL_KEY, "external": EXTERNAL_KEY}


def bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Return the raw bearer token, or an empty string when absent.

    Presence is checked by each request descriptor so that a missing token is
    reported the same way everywhere.
    """
    return credentials.credentials if credentials is not None else ""


def thing_key(authorization: str = Header(default="")) -> ThingKeyReq:
    """Decode an ``Authorization: Thing <key>`` or ``External <key>`` header.

    Parameters
    ----------
    authorization : str
        Raw header value.

    Returns
    -------
    ThingKeyReq
        Unvalidated key request; unknown schemes yield an empty key.
    """
    scheme, _, value = authorization.strip().partition(" ")
    key_type = THING_KEY_SCHEMES.get(scheme.lower())
    if key_type is None:
        return ThingKeyReq(value="")
    return ThingKeyReq(value=value.strip(), key_type=key_type)


def page_query(
    offset: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    name: str | None = Query(default=None),
    order: str | None = Query(default=None),
    direction: str | None = Query(default=None, alias="dir"),
) -> PageMetadata:
    """Decode listing parameters from the query string."""
    return build_page_metadata(
        default_limit=get_settings().default_page_limit,
        offset=offset,
        limit=limit,
        name=name,
        order=order,
        direction=direction,
    )


def membership_page_query(
    page: PageMetadata = Depends(page_query),
    email: str | None = Query(default=None),
) -> PageMetadata:
    """Decode membership listing parameters, which add an email filter."""
    return build_page_metadata(
        default_limit=get_settings().default_page_limit,
        offset=page.offset,
        limit=page.limit,
        name=page.name,
        order=page.order,
        direction=page.direction,
        email=email,
    )


def search_page(body: SearchRequest | None = Body(default=None)) -> PageMetadata:
    """Decode listing parameters from a ``/search`` body.

    A missing body is the unfiltered first page.
    """
    body = body or SearchRequest()
    return build_page_metadata(
        default_limit=get_settings().default_page_limit,
        offset=body.offset,
        limit=body.limit,
        name=body.name,
        order=body.order,
        direction=body.dir,
    )


def require_json(request: Request) -> None:
    """Reject bodies that are not declared as JSON."""
    if CONTENT_TYPE_JSON not in request.headers.get("content-type", ""):
        raise UnsupportedMediaTypeError()


async def commit_session(session: AsyncSession) -> None:
    """Commit the current transaction.

    Parameters
    ----------
    session : AsyncSession
        Active database session.

    Returns
    -------
    None
        Commits current transaction; constraint violations become conflicts.
    """
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError() from exc
