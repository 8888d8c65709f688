# alumni/services/comment.py
import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload

from alumni.core import permissions
from alumni.core.decorator import db_exception
from alumni.models.community import Community
from alumni.models.community_comment import CommunityComment
from alumni.models.community_membership import CommunityMembership
from alumni.models.like import CommentLike
from alumni.models.user import User
from alumni.schemas.comment import CommentCreate, CommentUpdate
from alumni.services.moderation import record_action
from alumni.services.post import PostService
from alumni.utils.pagination import paginate

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, db: Session):
        self.db = db
        self.posts = PostService(db)

    # ==================== Helpers ====================

    def load_comment(
        self, comment_id: int, user: User
    ) -> Tuple[CommunityComment, Community, Optional[CommunityMembership]]:
        comment = (
            self.db.query(CommunityComment)
            .filter(CommunityComment.id == comment_id)
            .first()
        )
        if not comment or comment.status == "deleted":
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Comment not found",
            )

        _, community, membership = self.posts.load_post(comment.post_id, user)

        if comment.status != "approved" and not (
            comment.author_id == user.id
            or permissions.can_manage(user, community, membership)
        ):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Comment not found",
            )

        return comment, community, membership

    def _ensure_owner_or_manager(
        self,
        comment: CommunityComment,
        community: Community,
        membership: Optional[CommunityMembership],
        user: User,
        action: str,
    ) -> None:
        if comment.author_id != user.id:
            self.posts.communities.ensure_can_manage(user, community, membership, action)

    def _log(self, comment: CommunityComment, community: Community, user: User, action: str):
        record_action(
            self.db,
            community_id=community.id,
            actor_id=user.id,
            entity_type="comment",
            entity_id=comment.id,
            action=action,
        )

    def _save(self, comment: CommunityComment) -> CommunityComment:
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def _like_result(self, comment_id: int, liked: bool) -> dict:
        count = (
            self.db.query(CommentLike).filter(CommentLike.comment_id == comment_id).count()
        )
        return {"comment_id": comment_id, "liked": liked, "like_count": count}

    # ==================== Lifecycle ====================

    @db_exception
    def create_comment(
        self, post_id: int, comment_in: CommentCreate, user: User
    ) -> CommunityComment:
        post, community, membership = self.posts.load_post(post_id, user)
        self.posts.communities.ensure_active(community)

        if not community.allow_comments:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Comments are disabled in this community",
            )
        if not permissions.can_comment(membership):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You must be a member of this community to comment",
            )
        if post.status != "approved":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot comment on a post that is not approved",
            )

        if comment_in.parent_comment_id is not None:
            parent = (
                self.db.query(CommunityComment)
                .filter(
                    CommunityComment.id == comment_in.parent_comment_id,
                    CommunityComment.post_id == post.id,
                )
                .first()
            )
            if not parent or parent.status == "deleted":
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Parent comment not found",
                )
            if parent.parent_comment_id is not None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Replies can only be one level deep",
                )

        comment = CommunityComment(
            post_id=post.id,
            author_id=user.id,
            parent_comment_id=comment_in.parent_comment_id,
            content=comment_in.content.strip(),
            status="approved",
        )
        self.db.add(comment)
        comment = self._save(comment)
        logger.info(f"Comment {comment.id} added to post {post.id} by user {user.id}")
        return comment

    def list_comments(
        self, post_id: int, user: User, page: int = 1, size: int = 20
    ) -> Tuple[List[CommunityComment], dict]:
        """Top-level approved comments, each with its approved replies."""
        post, _, _ = self.posts.load_post(post_id, user)

        query = (
            self.db.query(CommunityComment)
            .options(
                selectinload(CommunityComment.author),
                selectinload(CommunityComment.replies).selectinload(CommunityComment.author),
            )
            .filter(
                CommunityComment.post_id == post.id,
                CommunityComment.parent_comment_id.is_(None),
                CommunityComment.status == "approved",
            )
            .order_by(CommunityComment.created_at.asc(), CommunityComment.id.asc())
        )
        comments, pagination = paginate(query, page, size)

        for comment in comments:
            comment.visible_replies = [
                reply for reply in comment.replies if reply.status == "approved"
            ]
        return comments, pagination

    def list_replies(
        self, comment_id: int, user: User, page: int = 1, size: int = 20
    ) -> Tuple[List[CommunityComment], dict]:
        comment, _, _ = self.load_comment(comment_id, user)
        query = (
            self.db.query(CommunityComment)
            .options(selectinload(CommunityComment.author))
            .filter(
                CommunityComment.parent_comment_id == comment.id,
                CommunityComment.status == "approved",
            )
            .order_by(CommunityComment.created_at.asc(), CommunityComment.id.asc())
        )
        return paginate(query, page, size)

    def update_comment(
        self, comment_id: int, comment_in: CommentUpdate, user: User
    ) -> CommunityComment:
        comment, community, membership = self.load_comment(comment_id, user)
        self._ensure_owner_or_manager(comment, community, membership, user, "update comment")

        comment.content = comment_in.content.strip()
        comment.is_edited = True
        comment.edited_at = permissions.utcnow()
        return self._save(comment)

    def delete_comment(self, comment_id: int, user: User) -> CommunityComment:
        """Soft delete; replies stay attached to their parent id."""
        comment, community, membership = self.load_comment(comment_id, user)
        self._ensure_owner_or_manager(comment, community, membership, user, "delete comment")

        comment.status = "deleted"
        if comment.author_id != user.id:
            self._log(comment, community, user, "delete")
        logger.info(f"Comment {comment.id} deleted by user {user.id}")
        return self._save(comment)

    def moderate(self, comment_id: int, user: User, approve: bool) -> CommunityComment:
        action = "approve" if approve else "reject"
        comment, community, membership = self.load_comment(comment_id, user)
        self.posts.communities.ensure_can_manage(
            user, community, membership, f"{action} comment"
        )

        comment.status = "approved" if approve else "rejected"
        self._log(comment, community, user, action)
        return self._save(comment)

    # ==================== Likes ====================

    @db_exception
    def like(self, comment_id: int, user: User) -> dict:
        comment, _, _ = self.load_comment(comment_id, user)
        existing = (
            self.db.query(CommentLike)
            .filter(CommentLike.comment_id == comment.id, CommentLike.user_id == user.id)
            .first()
        )
        if existing is None:
            self.db.add(CommentLike(comment_id=comment.id, user_id=user.id))
            self.db.commit()
        return self._like_result(comment.id, True)

    def unlike(self, comment_id: int, user: User) -> dict:
        comment, _, _ = self.load_comment(comment_id, user)
        existing = (
            self.db.query(CommentLike)
            .filter(CommentLike.comment_id == comment.id, CommentLike.user_id == user.id)
            .first()
        )
        if existing is not None:
            self.db.delete(existing)
            self.db.commit()
        return self._like_result(comment.id, False)
