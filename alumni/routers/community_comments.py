# alumni/routers/community_comments.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from alumni.core.config import settings
from alumni.core.database import get_db
from alumni.core.dependencies import get_current_user
from alumni.models.user import User
from alumni.schemas.comment import (
    CommentCreate,
    CommentLikeResponse,
    CommentResponse,
    CommentUpdate,
    CommentWithReplies,
)
from alumni.schemas.common import ApiResponse, Page
from alumni.services.comment import CommentService

router = APIRouter(
    prefix="/community-comments",
    tags=["Community Comments"],
    responses={404: {"description": "Not found"}},
)


@router.post(
    "/post/{post_id}",
    response_model=ApiResponse[CommentResponse],
    status_code=201,
)
def create_comment(
    post_id: int,
    comment_in: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Comment on a post, or reply to a top-level comment via parent_comment_id.
    """
    service = CommentService(db)
    comment = service.create_comment(post_id, comment_in, current_user)
    return {"success": True, "message": "Comment added successfully", "data": comment}


@router.get("/post/{post_id}", response_model=ApiResponse[Page[CommentWithReplies]])
def list_comments(
    post_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CommentService(db)
    comments, pagination = service.list_comments(post_id, current_user, page, size)
    return {"success": True, "data": {"items": comments, **pagination}}


@router.get("/{comment_id}/replies", response_model=ApiResponse[Page[CommentResponse]])
def list_replies(
    comment_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CommentService(db)
    replies, pagination = service.list_replies(comment_id, current_user, page, size)
    return {"success": True, "data": {"items": replies, **pagination}}


@router.patch("/{comment_id}", response_model=ApiResponse[CommentResponse])
def update_comment(
    comment_id: int,
    comment_in: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CommentService(db)
    comment = service.update_comment(comment_id, comment_in, current_user)
    return {"success": True, "message": "Comment updated successfully", "data": comment}


@router.delete("/{comment_id}", response_model=ApiResponse[CommentResponse])
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CommentService(db)
    comment = service.delete_comment(comment_id, current_user)
    return {"success": True, "message": "Comment deleted successfully", "data": comment}


@router.post("/{comment_id}/like", response_model=ApiResponse[CommentLikeResponse])
def like_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CommentService(db)
    return {"success": True, "data": service.like(comment_id, current_user)}


@router.delete("/{comment_id}/like", response_model=ApiResponse[CommentLikeResponse])
def unlike_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CommentService(db)
    return {"success": True, "data": service.unlike(comment_id, current_user)}


@router.post("/{comment_id}/approve", response_model=ApiResponse[CommentResponse])
def approve_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CommentService(db)
    comment = service.moderate(comment_id, current_user, approve=True)
    return {"success": True, "message": "Comment approved", "data": comment}


@router.post("/{comment_id}/reject", response_model=ApiResponse[CommentResponse])
def reject_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CommentService(db)
    comment = service.moderate(comment_id, current_user, approve=False)
    return {"success": True, "message": "Comment rejected", "data": comment}
