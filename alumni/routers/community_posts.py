# alumni/routers/community_posts.py
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from alumni.core.config import settings
from alumni.core.database import get_db
from alumni.core.dependencies import get_current_user
from alumni.models.user import User
from alumni.schemas.common import ApiResponse, ModerationReason, Page
from alumni.schemas.post import (
    LikeStatusResponse,
    PollResultResponse,
    PollVoteRequest,
    PostCreate,
    PostResponse,
    PostUpdate,
    TagCount,
    TrendingPostResponse,
)
from alumni.services.like import LikeService
from alumni.services.post import PostService

router = APIRouter(
    prefix="/community-posts",
    tags=["Community Posts"],
    responses={404: {"description": "Not found"}},
)


# ==================== Community-scoped Endpoints ====================


@router.post(
    "/community/{community_id}",
    response_model=ApiResponse[PostResponse],
    status_code=201,
)
def create_post(
    community_id: int,
    post_in: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a post in a community.
    Posts by non-moderators start pending when the community requires approval.
    """
    service = PostService(db)
    post, message = service.create_post(community_id, post_in, current_user)
    return {"success": True, "message": message, "data": post}


@router.get("/community/{community_id}", response_model=ApiResponse[Page[PostResponse]])
def list_posts(
    community_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    status: Optional[str] = Query(None, pattern="^(approved|pending|rejected)$"),
    type: Optional[str] = Query(None, pattern="^(text|image|video|poll|announcement)$"),
    tag: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Posts of a community, pinned first.
    Hidden and closed communities require membership.
    """
    service = PostService(db)
    posts, pagination = service.list_posts(
        community_id,
        current_user,
        page,
        size,
        status_filter=status,
        post_type=type,
        tag=tag,
        search=search,
    )
    return {"success": True, "data": {"items": posts, **pagination}}


@router.get(
    "/community/{community_id}/pending",
    response_model=ApiResponse[Page[PostResponse]],
)
def list_pending_posts(
    community_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Posts awaiting approval. Managers only."""
    service = PostService(db)
    posts, pagination = service.list_pending(community_id, current_user, page, size)
    return {"success": True, "data": {"items": posts, **pagination}}


@router.get(
    "/community/{community_id}/trending",
    response_model=ApiResponse[List[TrendingPostResponse]],
)
def trending_posts(
    community_id: int,
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = PostService(db)
    return {"success": True, "data": service.trending(community_id, current_user, limit)}


@router.get("/community/{community_id}/tags", response_model=ApiResponse[List[TagCount]])
def popular_tags(
    community_id: int,
    limit: int = Query(8, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = PostService(db)
    return {"success": True, "data": service.popular_tags(community_id, current_user, limit)}


# ==================== Post Endpoints ====================


@router.get("/{post_id}", response_model=ApiResponse[PostResponse])
def get_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a post. Each read counts as a view."""
    service = PostService(db)
    return {"success": True, "data": service.get_post(post_id, current_user)}


@router.patch("/{post_id}", response_model=ApiResponse[PostResponse])
def update_post(
    post_id: int,
    post_in: PostUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Author, community managers or super admins."""
    service = PostService(db)
    post = service.update_post(post_id, post_in, current_user)
    return {"success": True, "message": "Post updated successfully", "data": post}


@router.delete("/{post_id}", response_model=ApiResponse[PostResponse])
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Soft delete. Author, community managers or super admins."""
    service = PostService(db)
    post = service.delete_post(post_id, current_user)
    return {"success": True, "message": "Post deleted successfully", "data": post}


@router.post("/{post_id}/like", response_model=ApiResponse[LikeStatusResponse])
def like_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = LikeService(db)
    return {"success": True, "data": service.like(post_id, current_user)}


@router.delete("/{post_id}/like", response_model=ApiResponse[LikeStatusResponse])
def unlike_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = LikeService(db)
    return {"success": True, "data": service.unlike(post_id, current_user)}


@router.post("/{post_id}/vote", response_model=ApiResponse[PollResultResponse])
def vote_poll(
    post_id: int,
    vote_in: PollVoteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Vote on a poll. A new vote replaces the previous one."""
    service = PostService(db)
    post = service.vote(post_id, vote_in.option_index, current_user)
    options = list(post.poll_options)
    return {
        "success": True,
        "message": "Vote recorded",
        "data": {
            "post_id": post.id,
            "options": options,
            "total_votes": sum(option.vote_count for option in options),
            "my_vote": post.my_vote,
        },
    }


# ==================== Moderation Endpoints ====================


@router.post("/{post_id}/approve", response_model=ApiResponse[PostResponse])
def approve_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = PostService(db)
    post = service.approve_post(post_id, current_user)
    return {"success": True, "message": "Post approved", "data": post}


@router.post("/{post_id}/reject", response_model=ApiResponse[PostResponse])
def reject_post(
    post_id: int,
    reason_in: Optional[ModerationReason] = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = PostService(db)
    post = service.reject_post(
        post_id, current_user, reason_in.reason if reason_in else None
    )
    return {"success": True, "message": "Post rejected", "data": post}


@router.post("/{post_id}/pin", response_model=ApiResponse[PostResponse])
def pin_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = PostService(db)
    post = service.set_pinned(post_id, current_user, True)
    return {"success": True, "message": "Post pinned", "data": post}


@router.post("/{post_id}/unpin", response_model=ApiResponse[PostResponse])
def unpin_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = PostService(db)
    post = service.set_pinned(post_id, current_user, False)
    return {"success": True, "message": "Post unpinned", "data": post}
