"""Closed role set shared by organizations and groups."""

from __future__ import annotations

from app.errors import InvalidRoleError

OWNER = "owner"
ADMIN = "admin"
EDITOR = "editor"
VIEWER = "viewer"

ROLE_RANKS: dict[str, int] = {VIEWER: 1, EDITOR: 2, ADMIN: 3, OWNER: 4}

# Owner comes from the creator of an organization or group and is never
# granted through membership endpoints.
ASSIGNABLE_ROLES = frozenset({ADMIN, EDITOR, VIEWER})


def validate_assignable_role(role: str) -> None:
    """Reject roles that membership endpoints may not assign.

    Parameters
    ----------
    role : str
        Requested role.

    Returns
    -------
    None
        Raises ``InvalidRoleError`` for owner (in any case) or unknown roles.
    """
    if role.strip().lower() == OWNER:
        raise InvalidRoleError("owner role cannot be assigned")
    if role not in ASSIGNABLE_ROLES:
        raise InvalidRoleError()


def role_satisfies(role: str | None, required: str) -> bool:
    """Return whether ``role`` grants at least ``required``.

    Parameters
    ----------
    role : str | None
        Effective role of the caller, if any.
    required : str
        Minimum role needed.

    Returns
    -------
    bool
        Whether the caller's role is high enough.
    """
    if role is None:
        return False
    return ROLE_RANKS.get(role, 0) >= ROLE_RANKS[required]


def highest_role(*roles: str | None) -> str | None:
    """Return the highest-ranked role among the candidates."""
    present = [role for role in roles if role is not None]
    if not present:
        return None
    return max(present, key=lambda role: ROLE_RANKS.get(role, 0))
