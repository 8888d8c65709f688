# alumni/services/like.py
import logging
from typing import List, Tuple

from sqlalchemy.orm import Session, selectinload

from alumni.core.decorator import db_exception
from alumni.models.community import Community
from alumni.models.community_post import CommunityPost
from alumni.models.like import PostLike
from alumni.models.user import User
from alumni.services.post import PostService
from alumni.utils.pagination import paginate

logger = logging.getLogger(__name__)

MAX_LIKERS_PAGE = 50


class LikeService:
    """PostLike rows are the only record of post likes; counts are derived from them."""

    def __init__(self, db: Session):
        self.db = db
        self.posts = PostService(db)

    def _existing(self, post_id: int, user_id: int):
        return (
            self.db.query(PostLike)
            .filter(PostLike.post_id == post_id, PostLike.user_id == user_id)
            .first()
        )

    def _count(self, post_id: int) -> int:
        return self.db.query(PostLike).filter(PostLike.post_id == post_id).count()

    def _result(self, post_id: int, liked: bool) -> dict:
        return {"post_id": post_id, "liked": liked, "like_count": self._count(post_id)}

    @db_exception
    def like(self, post_id: int, user: User) -> dict:
        """Idempotent: liking an already liked post changes nothing."""
        post, _, _ = self.posts.load_post(post_id, user)
        if self._existing(post.id, user.id) is None:
            self.db.add(PostLike(post_id=post.id, user_id=user.id))
            self.db.commit()
        return self._result(post.id, True)

    def unlike(self, post_id: int, user: User) -> dict:
        """Idempotent: unliking a post that was never liked is a no-op."""
        post, _, _ = self.posts.load_post(post_id, user)
        existing = self._existing(post.id, user.id)
        if existing is not None:
            self.db.delete(existing)
            self.db.commit()
        return self._result(post.id, False)

    @db_exception
    def toggle(self, post_id: int, user: User) -> dict:
        post, _, _ = self.posts.load_post(post_id, user)
        existing = self._existing(post.id, user.id)
        if existing is None:
            self.db.add(PostLike(post_id=post.id, user_id=user.id))
            liked = True
        else:
            self.db.delete(existing)
            liked = False
        self.db.commit()
        return self._result(post.id, liked)

    def status(self, post_id: int, user: User) -> dict:
        post, _, _ = self.posts.load_post(post_id, user)
        return self._result(post.id, self._existing(post.id, user.id) is not None)

    def likers(
        self, post_id: int, user: User, page: int = 1, size: int = 20
    ) -> Tuple[List[User], dict]:
        post, _, _ = self.posts.load_post(post_id, user)
        query = (
            self.db.query(User)
            .join(PostLike, PostLike.user_id == User.id)
            .filter(PostLike.post_id == post.id)
            .order_by(PostLike.created_at.desc(), PostLike.id.desc())
        )
        return paginate(query, page, min(size, MAX_LIKERS_PAGE))

    def liked_posts(
        self, user: User, page: int = 1, size: int = 20
    ) -> Tuple[List[CommunityPost], dict]:
        """The user's like history, limited to posts still visible in their tenant."""
        query = (
            self.db.query(CommunityPost)
            .options(
                selectinload(CommunityPost.author),
                selectinload(CommunityPost.poll_options),
            )
            .join(PostLike, PostLike.post_id == CommunityPost.id)
            .join(Community, Community.id == CommunityPost.community_id)
            .filter(
                PostLike.user_id == user.id,
                CommunityPost.status == "approved",
                Community.tenant_id == user.tenant_id,
            )
            .order_by(PostLike.created_at.desc(), PostLike.id.desc())
        )
        posts, pagination = paginate(query, page, size)
        for post in posts:
            post.liked_by_me = True
        return posts, pagination
