# alumni/routers/communities.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from alumni.core.config import settings
from alumni.core.database import get_db
from alumni.core.dependencies import get_current_user
from alumni.models.user import User
from alumni.schemas.common import ApiResponse, ModerationActionResponse, Page
from alumni.schemas.community import CommunityCreate, CommunityResponse, CommunityUpdate
from alumni.schemas.membership import InviteRequest, MembershipResponse
from alumni.services.community import CommunityService
from alumni.services.membership import MembershipService
from alumni.services.moderation import ModerationLogService

router = APIRouter(
    prefix="/communities",
    tags=["Communities"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=ApiResponse[CommunityResponse], status_code=201)
def create_community(
    community_in: CommunityCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a community.
    Only college admins, HODs, staff and super admins can create communities.
    """
    service = CommunityService(db)
    community = service.create_community(community_in, current_user)
    return {"success": True, "message": "Community created successfully", "data": community}


@router.get("/", response_model=ApiResponse[Page[CommunityResponse]])
def list_communities(
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    q: Optional[str] = Query(None, description="Search by name or description"),
    type: Optional[str] = Query(None, pattern="^(open|closed|hidden)$"),
    tag: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None),
    include_archived: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List communities of the caller's tenant."""
    service = CommunityService(db)
    communities, pagination = service.list_communities(
        current_user,
        page,
        size,
        q=q,
        community_type=type,
        tag=tag,
        category_id=category_id,
        include_archived=include_archived,
    )
    return {"success": True, "data": {"items": communities, **pagination}}


@router.get("/{community_id}", response_model=ApiResponse[CommunityResponse])
def get_community(
    community_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CommunityService(db)
    return {"success": True, "data": service.get_community(community_id, current_user)}


@router.patch("/{community_id}", response_model=ApiResponse[CommunityResponse])
def update_community(
    community_id: int,
    community_in: CommunityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Update a community.
    Creator, community moderators/admins and super admins only.
    """
    service = CommunityService(db)
    community = service.update_community(community_id, community_in, current_user)
    return {"success": True, "message": "Community updated successfully", "data": community}


@router.delete("/{community_id}", response_model=ApiResponse[CommunityResponse])
def delete_community(
    community_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Archive a community.
    Creator and super admins only.
    """
    service = CommunityService(db)
    community = service.archive_community(community_id, current_user)
    return {"success": True, "message": "Community archived successfully", "data": community}


@router.post("/{community_id}/join", response_model=ApiResponse[MembershipResponse])
def join_community(
    community_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Join an open community, request to join a closed one, or accept an invitation.
    """
    service = MembershipService(db)
    membership, message = service.join(community_id, current_user)
    return {"success": True, "message": message, "data": membership}


@router.post("/{community_id}/leave", response_model=ApiResponse[MembershipResponse])
def leave_community(
    community_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = MembershipService(db)
    membership = service.leave(community_id, current_user)
    return {"success": True, "message": "Left the community", "data": membership}


@router.post(
    "/{community_id}/invite",
    response_model=ApiResponse[MembershipResponse],
    status_code=201,
)
def invite_member(
    community_id: int,
    invite_in: InviteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Invite a user of the same tenant.
    Requires invite permission, or being the creator or a super admin.
    """
    service = MembershipService(db)
    membership = service.invite(community_id, invite_in.user_id, current_user)
    return {"success": True, "message": "Invitation sent", "data": membership}


@router.get(
    "/{community_id}/moderation-log",
    response_model=ApiResponse[Page[ModerationActionResponse]],
)
def get_moderation_log(
    community_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    entity_type: Optional[str] = Query(
        None, pattern="^(membership|post|comment|report|community)$"
    ),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Moderation history of a community. Managers only."""
    communities = CommunityService(db)
    community = communities.get_community_or_404(community_id, current_user)
    membership = communities.get_membership(community.id, current_user.id)
    communities.ensure_can_manage(
        current_user, community, membership, "view moderation log"
    )

    actions, pagination = ModerationLogService(db).list_for_community(
        community.id, page, size, entity_type
    )
    return {"success": True, "data": {"items": actions, **pagination}}
