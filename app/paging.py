"""Canonical page, filter and ordering parameters for listings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import (
    EmailSizeError,
    InvalidDirectionError,
    InvalidOrderError,
    LimitSizeError,
    NameSizeError,
    OffsetSizeError,
)

NAME_ORDER = "name"
ID_ORDER = "id"
EMAIL_ORDER = "email"
ASC_DIR = "asc"
DESC_DIR = "desc"

MAX_NAME_SIZE = 1024
MAX_EMAIL_SIZE = 254
# Largest value SQLite can bind as an INTEGER.
MAX_OFFSET = 2**63 - 1
DEFAULT_ORDERS = frozenset({"", NAME_ORDER, ID_ORDER})
MEMBERSHIP_ORDERS = frozenset({"", EMAIL_ORDER, ID_ORDER})
DIRECTIONS = frozenset({"", ASC_DIR, DESC_DIR})

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PageMetadata:
    """Filter, sort and page parameters of one listing request.

    Attributes
    ----------
    offset : int
        Number of matching items to skip.
    limit : int
        Maximum number of items to return.
    name : str
        Case-insensitive substring filter on the name column.
    order : str
        Sort key; empty means creation order.
    direction : str
        Sort direction; empty means ascending.
    email : str
        Exact email filter, used by membership listings.
    """

    offset: int = 0
    limit: int = 10
    name: str = ""
    order: str = ""
    direction: str = ""
    email: str = ""


@dataclass(slots=True)
class Page(Generic[T]):
    """One page of results and the full matching cardinality."""

    total: int
    items: list[T] = field(default_factory=list)


def build_page_metadata(
    *,
    default_limit: int,
    offset: int | None = None,
    limit: int | None = None,
    name: str | None = None,
    order: str | None = None,
    direction: str | None = None,
    email: str | None = None,
) -> PageMetadata:
    """Build page metadata from query-string or body values.

    Both wire forms go through this function so that absent values and a
    zero limit resolve to the same defaults.

    Parameters
    ----------
    default_limit : int
        Limit applied when the request omits one or sends zero.
    offset, limit, name, order, direction, email
        Raw values as decoded from the request; ``None`` means absent.

    Returns
    -------
    PageMetadata
        Page metadata with defaults applied.
    """
    return PageMetadata(
        offset=offset or 0,
        limit=limit or default_limit,
        name=name or "",
        order=order or "",
        direction=direction or "",
        email=email or "",
    )


def validate_page_metadata(
    page: PageMetadata,
    *,
    max_limit: int,
    orders: frozenset[str] = DEFAULT_ORDERS,
) -> None:
    """Check page bounds and enumerated values.

    Parameters
    ----------
    page : PageMetadata
        Parameters to check.
    max_limit : int
        Resource-specific limit ceiling.
    orders : frozenset[str], default=DEFAULT_ORDERS
        Accepted sort keys.

    Returns
    -------
    None
        Raises a ``ValidationError`` subclass on the first violation.
    """
    if page.limit < 0 or page.limit > max_limit:
        raise LimitSizeError()
    if page.offset < 0 or page.offset > MAX_OFFSET:
        raise OffsetSizeError()
    if len(page.name) > MAX_NAME_SIZE:
        raise NameSizeError()
    if len(page.email) > MAX_EMAIL_SIZE:
        raise EmailSizeError()
    if page.order not in orders:
        raise InvalidOrderError()
    if page.direction not in DIRECTIONS:
        raise InvalidDirectionError()


def escape_like(value: str) -> str:
    """Escape ``LIKE`` wildcards so ``value`` matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def apply_ordering(statement: Select[Any], model: Any, page: PageMetadata) -> Select[Any]:
    """Order a statement deterministically.

    Without an explicit order rows come back in creation order. ``id`` is
    always the last sort key so ties never reorder between calls.

    Parameters
    ----------
    statement : Select
        Statement selecting ``model`` rows.
    model : Any
        Mapped class with ``id``, ``name`` and ``created_at`` columns.
    page : PageMetadata
        Requested order and direction.

    Returns
    -------
    Select
        Ordered statement.
    """
    direction = desc if page.direction == DESC_DIR else asc
    if page.order == NAME_ORDER:
        keys = [model.name, model.id]
    elif page.order == ID_ORDER:
        keys = [model.id]
    else:
        keys = [model.created_at, model.id]
    return statement.order_by(*(direction(key) for key in keys))


async def fetch_page(
    session: AsyncSession,
    statement: Select[Any],
    model: Any,
    page: PageMetadata,
) -> Page[Any]:
    """Filter, count, order and slice a statement.

    Parameters
    ----------
    session : AsyncSession
        Active database session.
    statement : Select
        Statement selecting the scoped ``model`` rows.
    model : Any
        Mapped class being listed.
    page : PageMetadata
        Filter and page parameters.

    Returns
    -------
    Page
        Requested slice and total matching count.
    """
    if page.name:
        statement = statement.where(
            model.name.ilike(f"%{escape_like(page.name)}%", escape="\\")
        )
    total = await session.scalar(
        select(func.count()).select_from(statement.subquery())
    )
    result = await session.execute(
        apply_ordering(statement, model, page).offset(page.offset).limit(page.limit)
    )
    return Page(total=total or 0, items=list(result.scalars().all()))
