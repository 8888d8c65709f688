# alumni/routers/likes.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from alumni.core.config import settings
from alumni.core.database import get_db
from alumni.core.dependencies import get_current_user
from alumni.models.user import User
from alumni.schemas.common import ApiResponse, Page, UserSummary
from alumni.schemas.post import LikeStatusResponse, PostResponse
from alumni.services.like import MAX_LIKERS_PAGE, LikeService

router = APIRouter(prefix="/likes", tags=["Likes"])


@router.post("/posts/{post_id}/toggle", response_model=ApiResponse[LikeStatusResponse])
def toggle_like(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = LikeService(db)
    result = service.toggle(post_id, current_user)
    message = "Post liked" if result["liked"] else "Post unliked"
    return {"success": True, "message": message, "data": result}


@router.get("/posts/{post_id}", response_model=ApiResponse[LikeStatusResponse])
def like_status(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = LikeService(db)
    return {"success": True, "data": service.status(post_id, current_user)}


@router.get("/posts/{post_id}/users", response_model=ApiResponse[Page[UserSummary]])
def post_likers(
    post_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=MAX_LIKERS_PAGE),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = LikeService(db)
    users, pagination = service.likers(post_id, current_user, page, size)
    return {"success": True, "data": {"items": users, **pagination}}


@router.get("/me", response_model=ApiResponse[Page[PostResponse]])
def my_liked_posts(
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = LikeService(db)
    posts, pagination = service.liked_posts(current_user, page, size)
    return {"success": True, "data": {"items": posts, **pagination}}
