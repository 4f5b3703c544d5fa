"""ORM models."""

from app.models.audit import AuditLog
from app.models.group import Group, GroupMembership
from app.models.organization import Organization, OrgMember
from app.models.profile import Profile
from app.models.thing import Thing
from app.models.user import AccessToken, User

__all__ = [
    "AccessToken",
    "AuditLog",
    "Group",
    "GroupMembership",
    "OrgMember",
    "Organization",
    "Profile",
    "Thing",
    "User",
]
