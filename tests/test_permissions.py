import pytest

from fencemark.core.exceptions import PermissionDenied
from fencemark.core.permissions import (
    can_assign_role,
    has_role,
    parse_role,
    require_member_manager,
)
from fencemark.models.organization import MemberRole


@pytest.mark.parametrize("value, role", [
    ("admin", MemberRole.ADMIN),
    ("Admin", MemberRole.ADMIN),
    ("read_only", MemberRole.READ_ONLY),
    ("ReadOnly", MemberRole.READ_ONLY),
    ("superuser", None),
    ("", None),
])
def test_parse_role(value, role):
    assert parse_role(value) == role


def test_role_hierarchy():
    assert has_role(MemberRole.OWNER, MemberRole.ADMIN)
    assert has_role(MemberRole.BILLING, MemberRole.MEMBER)
    assert not has_role(MemberRole.READ_ONLY, MemberRole.MEMBER)
    assert not has_role(None, MemberRole.READ_ONLY)


def test_member_management_needs_admin():
    require_member_manager(MemberRole.OWNER)
    require_member_manager(MemberRole.ADMIN)
    with pytest.raises(PermissionDenied):
        require_member_manager(MemberRole.MEMBER)


@pytest.mark.parametrize("actor, new_role, allowed", [
    (MemberRole.OWNER, MemberRole.ADMIN, True),
    (MemberRole.OWNER, MemberRole.OWNER, False),
    (MemberRole.ADMIN, MemberRole.ADMIN, True),
    (MemberRole.ADMIN, MemberRole.OWNER, False),
    (MemberRole.MEMBER, MemberRole.ADMIN, False),
])
def test_can_assign_role(actor, new_role, allowed):
    assert can_assign_role(actor, new_role) is allowed
