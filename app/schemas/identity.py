"""Identity, user and organization schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.common import APIModel, TokenResponse


class BootstrapRequest(BaseModel):
    """Create the first platform administrator."""

    email: str = Field(min_length=3, max_length=254)
    token_name: str = Field(default="default", min_length=1, max_length=255)


class UserCreateRequest(BaseModel):
    """Create a platform user."""

    email: str = Field(min_length=3, max_length=254)
    is_admin: bool = False
    token_name: str = Field(default="default", min_length=1, max_length=255)


class UserTokenResponse(APIModel):
    """Created user with its one-time token."""

    user_id: str
    email: str
    is_admin: bool
    token: TokenResponse


class OrgCreateRequest(BaseModel):
    """Create an organization owned by the caller."""

    name: str = Field(min_length=1, max_length=1024)


class OrgResponse(APIModel):
    """Organization metadata."""

    id: str
    name: str
    owner_id: str
    created_at: datetime


class OrgMemberEntry(BaseModel):
    """One organization member to add."""

    member_id: str = Field(min_length=1)
    role: str = Field(pattern="^(admin|editor|viewer)$")


class OrgMembersRequest(BaseModel):
    """Add members to an organization."""

    members: list[OrgMemberEntry] = Field(min_length=1)
