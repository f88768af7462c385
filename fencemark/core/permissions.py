"""
Permission System (RBAC)

Role checks for organization management. Business-data endpoints only
require an accepted membership; changing who belongs to an organization
requires Owner or Admin.

Role hierarchy: OWNER > ADMIN > MEMBER = BILLING > READ_ONLY
"""
from typing import Optional

from fencemark.models.organization import MemberRole, ROLE_HIERARCHY
from fencemark.core.exceptions import PermissionDenied


def has_role(role: Optional[MemberRole], required_role: MemberRole) -> bool:
    if role is None:
        return False
    return ROLE_HIERARCHY[role] >= ROLE_HIERARCHY[required_role]


def require_role(role: Optional[MemberRole], required_role: MemberRole) -> None:
    """
    Check the caller's role level.

    Raises PermissionDenied if the role is below required_role.
    """
    if not has_role(role, required_role):
        raise PermissionDenied(
            detail=f"This action requires {required_role.value} role or higher"
        )


def require_member_manager(role: Optional[MemberRole]) -> None:
    """Inviting, re-roling and removing members needs Admin or Owner."""
    require_role(role, MemberRole.ADMIN)


def parse_role(value: str) -> Optional[MemberRole]:
    """
    Parse a role name case-insensitively ("admin", "Admin", "READONLY").

    Returns None for unknown names.
    """
    if isinstance(value, MemberRole):
        return value
    normalized = (value or "").replace("_", "").replace(" ", "").lower()
    for role in MemberRole:
        if role.value.lower() == normalized:
            return role
    return None


def can_assign_role(actor_role: Optional[MemberRole], new_role: MemberRole) -> bool:
    """
    Check if actor can grant new_role.

    Rules:
    - Nobody can grant Owner (one owner per organization)
    - Admins cannot grant a role above their own
    """
    if new_role == MemberRole.OWNER:
        return False
    return has_role(actor_role, new_role)
