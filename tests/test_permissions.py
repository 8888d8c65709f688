from datetime import timedelta
from types import SimpleNamespace

import pytest

from alumni.core import permissions
from alumni.models.community_membership import MEMBERSHIP_ROLES


def membership(role="member", status="approved", end_date=None):
    return SimpleNamespace(role=role, status=status, suspension_end_date=end_date)


@pytest.mark.parametrize("role", MEMBERSHIP_ROLES)
def test_can_moderate_only_for_moderator_roles(role):
    m = membership(role=role)
    assert permissions.can_moderate(m) == (role in ("moderator", "admin"))
    assert permissions.can_invite(m) == (role in ("moderator", "admin"))
    assert permissions.can_post(m)
    assert permissions.can_comment(m)


def test_role_change_yields_matching_permissions():
    m = membership(role="member")
    assert not permissions.can_moderate(m)

    m.role = "moderator"
    assert permissions.can_moderate(m)

    m.role = "member"
    assert not permissions.can_moderate(m)


def test_unknown_role_has_no_permissions():
    assert permissions.derive_permissions("owner") == {
        "can_post": False,
        "can_comment": False,
        "can_invite": False,
        "can_moderate": False,
    }


def test_derived_permissions_are_copies():
    perms = permissions.derive_permissions("member")
    perms["can_moderate"] = True
    assert permissions.derive_permissions("member")["can_moderate"] is False


@pytest.mark.parametrize("status", ["pending", "rejected", "left", "suspended"])
def test_inactive_memberships_have_no_permissions(status):
    m = membership(role="admin", status=status)
    assert not permissions.can_post(m)
    assert not permissions.can_moderate(m)


def test_no_membership_has_no_permissions():
    assert not permissions.can_post(None)
    assert permissions.effective_status(None) is None


def test_lapsed_suspension_counts_as_approved():
    now = permissions.utcnow()
    m = membership(status="suspended", end_date=now - timedelta(minutes=1))
    assert permissions.suspension_lapsed(m, now)
    assert permissions.effective_status(m, now) == "approved"
    assert permissions.can_post(m, now)


def test_open_ended_suspension_never_lapses():
    m = membership(status="suspended", end_date=None)
    assert not permissions.suspension_lapsed(m)
    assert permissions.effective_status(m) == "suspended"


def test_naive_end_date_is_read_as_utc():
    now = permissions.utcnow()
    naive_future = (now + timedelta(hours=1)).replace(tzinfo=None)
    m = membership(status="suspended", end_date=naive_future)
    assert not permissions.suspension_lapsed(m, now)


def test_creator_and_super_admin_manage_without_membership():
    community = SimpleNamespace(created_by=1, type="closed")
    creator = SimpleNamespace(id=1, role="staff", tenant_id=1)
    admin = SimpleNamespace(id=2, role="super_admin", tenant_id=9)
    outsider = SimpleNamespace(id=3, role="alumni", tenant_id=1)

    assert permissions.can_manage(creator, community, None)
    assert permissions.can_manage(admin, community, None)
    assert not permissions.can_manage(outsider, community, None)


def test_content_visibility():
    open_community = SimpleNamespace(created_by=1, type="open")
    closed_community = SimpleNamespace(created_by=1, type="closed")
    outsider = SimpleNamespace(id=3, role="alumni", tenant_id=1)

    assert permissions.can_view_content(outsider, open_community, None)
    assert not permissions.can_view_content(outsider, closed_community, None)
    assert permissions.can_view_content(outsider, closed_community, membership())
    assert not permissions.can_view_content(
        outsider, closed_community, membership(status="pending")
    )


def test_same_tenant():
    user = SimpleNamespace(role="alumni", tenant_id=1)
    admin = SimpleNamespace(role="super_admin", tenant_id=1)
    assert permissions.same_tenant(user, 1)
    assert not permissions.same_tenant(user, 2)
    assert permissions.same_tenant(admin, 2)
