"""
Community permission evaluator.

Pure functions over membership rows, the acting user and the community.
Nothing here touches the session; callers load the rows and decide what
HTTP error to raise.

Permissions are derived from the membership role only. A role change always
yields the matching permission set, so ``can_moderate`` implies the role is
``moderator`` or ``admin``.
"""

from datetime import datetime, timezone
from typing import Optional

FULL_PERMISSIONS = {
    "can_post": True,
    "can_comment": True,
    "can_invite": True,
    "can_moderate": True,
}

MEMBER_PERMISSIONS = {
    "can_post": True,
    "can_comment": True,
    "can_invite": False,
    "can_moderate": False,
}

ROLE_PERMISSIONS = {
    "admin": FULL_PERMISSIONS,
    "moderator": FULL_PERMISSIONS,
    "member": MEMBER_PERMISSIONS,
}

# Global roles allowed to create communities and categories
COMMUNITY_CREATOR_ROLES = ("super_admin", "college_admin", "hod", "staff")
CATEGORY_EDITOR_ROLES = ("super_admin", "college_admin", "hod", "staff")
CATEGORY_DELETER_ROLES = ("super_admin", "college_admin", "hod")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_aware(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def derive_permissions(role: Optional[str]) -> dict:
    return dict(ROLE_PERMISSIONS.get(role, {key: False for key in FULL_PERMISSIONS}))


def suspension_lapsed(membership, now: Optional[datetime] = None) -> bool:
    if membership is None or membership.status != "suspended":
        return False
    end_date = as_aware(membership.suspension_end_date)
    if end_date is None:
        return False
    return end_date <= (now or utcnow())


def effective_status(membership, now: Optional[datetime] = None) -> Optional[str]:
    """Status with lapsed suspensions treated as approved."""
    if membership is None:
        return None
    if suspension_lapsed(membership, now):
        return "approved"
    return membership.status


def is_active_member(membership, now: Optional[datetime] = None) -> bool:
    return effective_status(membership, now) == "approved"


def _has(membership, permission: str, now: Optional[datetime] = None) -> bool:
    if not is_active_member(membership, now):
        return False
    return bool(derive_permissions(membership.role).get(permission))


def can_moderate(membership, now: Optional[datetime] = None) -> bool:
    return _has(membership, "can_moderate", now)


def can_invite(membership, now: Optional[datetime] = None) -> bool:
    return _has(membership, "can_invite", now)


def can_post(membership, now: Optional[datetime] = None) -> bool:
    return _has(membership, "can_post", now)


def can_comment(membership, now: Optional[datetime] = None) -> bool:
    return _has(membership, "can_comment", now)


def is_super_admin(user) -> bool:
    return user is not None and user.role == "super_admin"


def is_creator(user, community) -> bool:
    return user is not None and community.created_by == user.id


def can_manage(user, community, membership, now: Optional[datetime] = None) -> bool:
    # creator and super_admin bypass membership state entirely
    return (
        is_creator(user, community)
        or is_super_admin(user)
        or can_moderate(membership, now)
    )


def can_view_content(user, community, membership, now: Optional[datetime] = None) -> bool:
    """Open communities are readable by anyone in the tenant."""
    if community.type == "open":
        return True
    return (
        is_super_admin(user)
        or is_creator(user, community)
        or is_active_member(membership, now)
    )


def same_tenant(user, tenant_id) -> bool:
    return is_super_admin(user) or user.tenant_id == tenant_id
