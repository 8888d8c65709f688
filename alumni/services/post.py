# alumni/services/post.py
import logging
from collections import Counter
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session, selectinload

from alumni.core import permissions
from alumni.core.cache import cache_delete, cache_get, cache_set
from alumni.core.decorator import db_exception
from alumni.models.community import Community
from alumni.models.community_membership import CommunityMembership
from alumni.models.community_post import CommunityPost
from alumni.models.like import PostLike
from alumni.models.poll import PollOption, PollVote
from alumni.models.user import User
from alumni.schemas.post import PostCreate, PostUpdate
from alumni.services.community import CommunityService
from alumni.services.moderation import record_action
from alumni.utils.pagination import paginate

logger = logging.getLogger(__name__)


def tag_cache_key(community_id: int) -> str:
    return f"community:{community_id}:tag_counts"


class PostService:
    def __init__(self, db: Session):
        self.db = db
        self.communities = CommunityService(db)

    # ==================== Helpers ====================

    def load_post(
        self, post_id: int, user: User
    ) -> Tuple[CommunityPost, Community, Optional[CommunityMembership]]:
        """
        Load a post the user may see.

        Deleted posts are gone for everyone. Pending and rejected posts are
        visible to their author and to community managers only.
        """
        post = (
            self.db.query(CommunityPost)
            .options(
                selectinload(CommunityPost.author),
                selectinload(CommunityPost.poll_options),
            )
            .filter(CommunityPost.id == post_id)
            .first()
        )
        if not post or post.status == "deleted":
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Post not found",
            )

        community = self.communities.get_community_or_404(post.community_id, user)
        membership = self.communities.get_membership(community.id, user.id)
        self.communities.ensure_can_view(user, community, membership)

        if post.status != "approved" and not (
            post.author_id == user.id
            or permissions.can_manage(user, community, membership)
        ):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Post not found",
            )

        return post, community, membership

    def _attach_viewer_state(self, posts: List[CommunityPost], user: User) -> None:
        if not posts:
            return
        post_ids = [post.id for post in posts]

        liked = {
            row.post_id
            for row in self.db.query(PostLike.post_id).filter(
                PostLike.user_id == user.id, PostLike.post_id.in_(post_ids)
            )
        }
        votes = {
            row.post_id: row.position
            for row in self.db.query(PollVote.post_id, PollOption.position)
            .join(PollOption, PollOption.id == PollVote.option_id)
            .filter(PollVote.user_id == user.id, PollVote.post_id.in_(post_ids))
        }

        for post in posts:
            post.liked_by_me = post.id in liked
            post.my_vote = votes.get(post.id)

    def _moderate(
        self, post_id: int, user: User, action: str
    ) -> Tuple[CommunityPost, Community]:
        post, community, membership = self.load_post(post_id, user)
        self.communities.ensure_can_manage(user, community, membership, f"{action} post")
        return post, community

    def _log(self, post: CommunityPost, user: User, action: str, reason=None) -> None:
        record_action(
            self.db,
            community_id=post.community_id,
            actor_id=user.id,
            entity_type="post",
            entity_id=post.id,
            action=action,
            reason=reason,
        )

    def _save(
        self, post: CommunityPost, user: User, invalidate: bool = True
    ) -> CommunityPost:
        self.db.commit()
        self.db.refresh(post)
        if invalidate:
            cache_delete(tag_cache_key(post.community_id))
        self._attach_viewer_state([post], user)
        return post

    # ==================== Lifecycle ====================

    @db_exception
    def create_post(
        self, community_id: int, post_in: PostCreate, user: User
    ) -> Tuple[CommunityPost, str]:
        """Create a post. It starts pending when approval is required and the author cannot moderate."""
        community = self.communities.get_community_or_404(community_id, user)
        self.communities.ensure_active(community)
        membership = self.communities.get_membership(community.id, user.id)

        if not permissions.is_active_member(membership):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You must be a member of this community to post",
            )
        if not permissions.can_post(membership):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions to create post",
            )

        is_moderator = permissions.can_moderate(membership)

        if not community.allow_member_posts and not is_moderator:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only moderators can post in this community",
            )
        if post_in.type == "poll" and not community.allow_polls:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Polls are disabled in this community",
            )
        if post_in.media_urls and not community.allow_media_uploads:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Media uploads are disabled in this community",
            )

        needs_approval = community.require_post_approval and not is_moderator

        post = CommunityPost(
            **post_in.model_dump(exclude={"poll_options"}),
            community_id=community.id,
            author_id=user.id,
            status="pending" if needs_approval else "approved",
        )
        post.poll_options = [
            PollOption(position=index, text=text)
            for index, text in enumerate(post_in.poll_options)
        ]
        self.db.add(post)

        post = self._save(post, user)
        logger.info(
            f"Post {post.id} created in community {community.id} by user {user.id} "
            f"(status={post.status})"
        )

        message = "Post submitted for approval" if needs_approval else "Post created successfully"
        return post, message

    def list_posts(
        self,
        community_id: int,
        user: User,
        page: int = 1,
        size: int = 20,
        status_filter: Optional[str] = None,
        post_type: Optional[str] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[CommunityPost], dict]:
        community = self.communities.get_community_or_404(community_id, user)
        membership = self.communities.get_membership(community.id, user.id)
        self.communities.ensure_can_view(user, community, membership)

        wanted = status_filter or "approved"
        if wanted != "approved":
            self.communities.ensure_can_manage(
                user, community, membership, f"view {wanted} posts"
            )

        query = (
            self.db.query(CommunityPost)
            .options(
                selectinload(CommunityPost.author),
                selectinload(CommunityPost.poll_options),
            )
            .filter(
                CommunityPost.community_id == community.id,
                CommunityPost.status == wanted,
            )
        )

        if post_type:
            query = query.filter(CommunityPost.type == post_type)
        if tag:
            query = query.filter(cast(CommunityPost.tags, String).ilike(f'%"{tag.lower()}"%'))
        if search:
            query = query.filter(
                or_(
                    CommunityPost.title.ilike(f"%{search}%"),
                    CommunityPost.content.ilike(f"%{search}%"),
                )
            )

        query = query.order_by(
            CommunityPost.is_pinned.desc(),
            CommunityPost.created_at.desc(),
            CommunityPost.id.desc(),
        )
        posts, pagination = paginate(query, page, size)
        self._attach_viewer_state(posts, user)
        return posts, pagination

    def get_post(self, post_id: int, user: User) -> CommunityPost:
        post, _, _ = self.load_post(post_id, user)
        post.view_count = (post.view_count or 0) + 1
        return self._save(post, user, invalidate=False)

    @db_exception
    def update_post(self, post_id: int, post_in: PostUpdate, user: User) -> CommunityPost:
        post, community, membership = self.load_post(post_id, user)
        if post.author_id != user.id:
            self.communities.ensure_can_manage(user, community, membership, "update post")

        updates = post_in.model_dump(exclude_unset=True)
        if "tags" in updates and updates["tags"] is not None:
            updates["tags"] = [t.strip().lower() for t in updates["tags"] if t.strip()]
        if updates.get("media_urls") and not community.allow_media_uploads:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Media uploads are disabled in this community",
            )

        for field, value in updates.items():
            if value is not None:
                setattr(post, field, value)

        return self._save(post, user)

    def delete_post(self, post_id: int, user: User) -> CommunityPost:
        """Soft delete. The community post count is derived, so it cannot go negative."""
        post, community, membership = self.load_post(post_id, user)
        if post.author_id != user.id:
            self.communities.ensure_can_manage(user, community, membership, "delete post")

        post.status = "deleted"
        post.is_pinned = False
        self._log(post, user, "delete")
        post = self._save(post, user)
        logger.info(f"Post {post.id} deleted by user {user.id}")
        return post

    def approve_post(self, post_id: int, user: User) -> CommunityPost:
        post, _ = self._moderate(post_id, user, "approve")
        if post.status != "pending":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only pending posts can be approved",
            )
        post.status = "approved"
        self._log(post, user, "approve")
        return self._save(post, user)

    def reject_post(self, post_id: int, user: User, reason: Optional[str] = None) -> CommunityPost:
        post, _ = self._moderate(post_id, user, "reject")
        if post.status != "pending":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only pending posts can be rejected",
            )
        post.status = "rejected"
        self._log(post, user, "reject", reason)
        return self._save(post, user)

    def set_pinned(self, post_id: int, user: User, pinned: bool) -> CommunityPost:
        action = "pin" if pinned else "unpin"
        post, _ = self._moderate(post_id, user, action)
        if post.status != "approved":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only approved posts can be pinned",
            )
        post.is_pinned = pinned
        self._log(post, user, action)
        return self._save(post, user)

    def list_pending(
        self, community_id: int, user: User, page: int = 1, size: int = 20
    ) -> Tuple[List[CommunityPost], dict]:
        return self.list_posts(community_id, user, page, size, status_filter="pending")

    # ==================== Polls ====================

    @db_exception
    def vote(self, post_id: int, option_index: int, user: User) -> CommunityPost:
        """Single choice: a new vote replaces the user's previous one."""
        post, _, _ = self.load_post(post_id, user)

        if not post.is_poll:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This post is not a poll",
            )
        if post.status != "approved":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot vote on a post that is not approved",
            )
        end_date = permissions.as_aware(post.poll_end_date)
        if end_date is not None and end_date <= permissions.utcnow():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Poll has ended",
            )

        option = next(
            (o for o in post.poll_options if o.position == option_index), None
        )
        if option is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid poll option",
            )

        vote = (
            self.db.query(PollVote)
            .filter(PollVote.post_id == post.id, PollVote.user_id == user.id)
            .first()
        )
        if vote is None:
            self.db.add(PollVote(post_id=post.id, option_id=option.id, user_id=user.id))
        else:
            vote.option_id = option.id

        self.db.commit()
        for poll_option in post.poll_options:
            self.db.refresh(poll_option)
        self._attach_viewer_state([post], user)
        return post

    # ==================== Discovery ====================

    def trending(self, community_id: int, user: User, limit: int = 5) -> List[CommunityPost]:
        """Approved posts ranked by likes, then comments, then views."""
        community = self.communities.get_community_or_404(community_id, user)
        membership = self.communities.get_membership(community.id, user.id)
        self.communities.ensure_can_view(user, community, membership)

        return (
            self.db.query(CommunityPost)
            .filter(
                CommunityPost.community_id == community.id,
                CommunityPost.status == "approved",
            )
            .order_by(
                CommunityPost.like_count.desc(),
                CommunityPost.comment_count.desc(),
                CommunityPost.view_count.desc(),
                CommunityPost.created_at.desc(),
            )
            .limit(limit)
            .all()
        )

    def popular_tags(self, community_id: int, user: User, limit: int = 8) -> List[dict]:
        community = self.communities.get_community_or_404(community_id, user)
        membership = self.communities.get_membership(community.id, user.id)
        self.communities.ensure_can_view(user, community, membership)

        counts = cache_get(tag_cache_key(community.id))
        if counts is None:
            counter = Counter()
            rows = self.db.query(CommunityPost.tags).filter(
                CommunityPost.community_id == community.id,
                CommunityPost.status == "approved",
            )
            for (tags,) in rows:
                counter.update(tags or [])
            counts = [
                {"name": name, "count": count}
                for name, count in sorted(counter.items(), key=lambda item: (-item[1], item[0]))
            ]
            cache_set(tag_cache_key(community.id), counts)

        return counts[:limit]
