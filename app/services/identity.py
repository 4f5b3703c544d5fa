"""Identity resolution, bootstrap and platform user provisioning."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError, ForbiddenError, InvalidCredentialError
from app.models.user import AccessToken, User
from app.services.audit import log_event
from app.services.security import IssuedToken, issue_token, lookup_hash, verify_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Caller:
    """Authenticated identity behind a bearer token.

    Attributes
    ----------
    id : str
        User identifier.
    email : str
        User email.
    is_admin : bool
        Whether the user is a platform administrator.
    """

    id: str
    email: str
    is_admin: bool = False


async def identify(session: AsyncSession, token: str) -> Caller:
    """Resolve a bearer token to its user.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    token : str
        Raw bearer token.

    Returns
    -------
    Caller
        Authenticated identity.
    """
    result = await session.execute(
        select(AccessToken, User)
        .join(User, User.id == AccessToken.user_id)
        .where(
            AccessToken.token_lookup == lookup_hash(token),
            AccessToken.revoked_at.is_(None),
        )
    )
    for access_token, user in result.all():
        if verify_token(token, access_token.token_hash):
            return Caller(id=user.id, email=user.email, is_admin=user.is_admin)
    raise InvalidCredentialError()


def require_platform_admin(caller: Caller) -> None:
    """Raise ``ForbiddenError`` unless the caller administers the platform."""
    if not caller.is_admin:
        raise ForbiddenError("platform administrator privileges required")


async def _ensure_email_available(session: AsyncSession, email: str) -> None:
    result = await session.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("user email already exists")


async def _create_user(
    session: AsyncSession, *, email: str, is_admin: bool, token_name: str
) -> tuple[User, AccessToken, IssuedToken]:
    await _ensure_email_available(session, email)
    user = User(email=email, is_admin=is_admin)
    session.add(user)
    await session.flush()

    issued = issue_token("adm" if is_admin else "usr")
    access_token = AccessToken(
        user_id=user.id,
        name=token_name,
        token_hash=issued.token_hash,
        token_lookup=issued.token_lookup,
    )
    session.add(access_token)
    await session.flush()
    return user, access_token, issued


async def bootstrap_admin(
    session: AsyncSession, *, email: str, token_name: str
) -> tuple[User, AccessToken, IssuedToken]:
    """Create the first platform administrator.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    email : str
        Administrator email.
    token_name : str
        Name of the issued token.

    Returns
    -------
    tuple[User, AccessToken, IssuedToken]
        Created user, token row and plaintext token.
    """
    result = await session.execute(select(User.id).limit(1))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("bootstrap already completed")

    user, access_token, issued = await _create_user(
        session, email=email, is_admin=True, token_name=token_name
    )
    await log_event(
        session,
        user_id=user.id,
        action="platform_bootstrapped",
        resource_type="user",
        resource_id=user.id,
        metadata={"email": email},
    )
    logger.info("Bootstrapped platform administrator %s", user.id)
    return user, access_token, issued


async def create_user(
    session: AsyncSession,
    caller: Caller,
    *,
    email: str,
    is_admin: bool,
    token_name: str,
) -> tuple[User, AccessToken, IssuedToken]:
    """Create a user on behalf of a platform administrator."""
    require_platform_admin(caller)
    user, access_token, issued = await _create_user(
        session, email=email, is_admin=is_admin, token_name=token_name
    )
    await log_event(
        session,
        user_id=caller.id,
        action="user_created",
        resource_type="user",
        resource_id=user.id,
        metadata={"email": email, "is_admin": int(is_admin)},
    )
    return user, access_token, issued
