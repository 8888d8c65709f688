# alumni/routers/community_memberships.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from alumni.core.config import settings
from alumni.core.database import get_db
from alumni.core.dependencies import get_current_user
from alumni.models.user import User
from alumni.schemas.common import ApiResponse, Page
from alumni.schemas.membership import MembershipResponse, SuspendRequest
from alumni.services.membership import MembershipService

router = APIRouter(
    prefix="/community-memberships",
    tags=["Community Memberships"],
    responses={404: {"description": "Not found"}},
)

STATUS_PATTERN = "^(pending|approved|rejected|suspended|left)$"


# ==================== Listings ====================


@router.get("/me", response_model=ApiResponse[Page[MembershipResponse]])
def my_memberships(
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    status: Optional[str] = Query(None, pattern=STATUS_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = MembershipService(db)
    memberships, pagination = service.my_memberships(
        current_user, page, size, status_filter=status
    )
    return {"success": True, "data": {"items": memberships, **pagination}}


@router.get("/community/{community_id}", response_model=ApiResponse[Page[MembershipResponse]])
def list_members(
    community_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    status: Optional[str] = Query(None, pattern=STATUS_PATTERN),
    role: Optional[str] = Query(None, pattern="^(member|moderator|admin)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Members of a community. Approved members by default;
    other statuses are visible to community managers only.
    """
    service = MembershipService(db)
    memberships, pagination = service.list_members(
        community_id, current_user, page, size, status_filter=status, role=role
    )
    return {"success": True, "data": {"items": memberships, **pagination}}


@router.get(
    "/community/{community_id}/pending",
    response_model=ApiResponse[Page[MembershipResponse]],
)
def list_pending(
    community_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = MembershipService(db)
    memberships, pagination = service.list_pending(community_id, current_user, page, size)
    return {"success": True, "data": {"items": memberships, **pagination}}


@router.get(
    "/community/{community_id}/moderators",
    response_model=ApiResponse[List[MembershipResponse]],
)
def list_moderators(
    community_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = MembershipService(db)
    return {"success": True, "data": service.list_moderators(community_id, current_user)}


# ==================== Moderation ====================


@router.post("/{membership_id}/approve", response_model=ApiResponse[MembershipResponse])
def approve_membership(
    membership_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = MembershipService(db)
    membership = service.approve(membership_id, current_user)
    return {"success": True, "message": "Membership approved", "data": membership}


@router.post("/{membership_id}/reject", response_model=ApiResponse[MembershipResponse])
def reject_membership(
    membership_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = MembershipService(db)
    membership = service.reject(membership_id, current_user)
    return {"success": True, "message": "Membership rejected", "data": membership}


@router.post("/{membership_id}/suspend", response_model=ApiResponse[MembershipResponse])
def suspend_member(
    membership_id: int,
    suspend_in: SuspendRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Suspend a member. Without an end date the suspension lasts until lifted."""
    service = MembershipService(db)
    membership = service.suspend(
        membership_id, current_user, suspend_in.reason, suspend_in.end_date
    )
    return {"success": True, "message": "Member suspended", "data": membership}


@router.post("/{membership_id}/unsuspend", response_model=ApiResponse[MembershipResponse])
def unsuspend_member(
    membership_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = MembershipService(db)
    membership = service.unsuspend(membership_id, current_user)
    return {"success": True, "message": "Suspension lifted", "data": membership}


@router.post("/{membership_id}/promote", response_model=ApiResponse[MembershipResponse])
def promote_member(
    membership_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = MembershipService(db)
    membership = service.promote(membership_id, current_user)
    return {"success": True, "message": "Member promoted to moderator", "data": membership}


@router.post("/{membership_id}/demote", response_model=ApiResponse[MembershipResponse])
def demote_member(
    membership_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = MembershipService(db)
    membership = service.demote(membership_id, current_user)
    return {"success": True, "message": "Moderator demoted to member", "data": membership}


@router.delete("/{membership_id}", response_model=ApiResponse[MembershipResponse])
def remove_member(
    membership_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = MembershipService(db)
    membership = service.remove(membership_id, current_user)
    return {"success": True, "message": "Member removed", "data": membership}
