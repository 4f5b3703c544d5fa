"""Common schema primitives."""

from pydantic import BaseModel, ConfigDict


class APIModel(BaseModel):
    """Base API model with attribute validation enabled."""

    model_config = ConfigDict(from_attributes=True)


class SearchRequest(BaseModel):
    """Body of a ``/search`` listing; mirrors the listing query string."""

    offset: int | None = None
    limit: int | None = None
    name: str | None = None
    order: str | None = None
    dir: str | None = None


class PageResponse(APIModel):
    """Metadata echoed with every listing page."""

    total: int
    offset: int
    limit: int
    order: str | None = None
    direction: str | None = None
    name: str | None = None


class TokenResponse(APIModel):
    """Return a generated token exactly once."""

    id: str
    token: str
    name: str
