# alumni/models/like.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.sql import func

from alumni.core.database import Base


class PostLike(Base):
    __tablename__ = "post_likes"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    post_id = Column(
        Integer, ForeignKey("community_posts.id"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # One like per user per post
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="unique_post_like"),)

    def __repr__(self):
        return f"<PostLike(post_id={self.post_id}, user_id={self.user_id})>"


class CommentLike(Base):
    __tablename__ = "comment_likes"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    comment_id = Column(
        Integer, ForeignKey("community_comments.id"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("comment_id", "user_id", name="unique_comment_like"),
    )

    def __repr__(self):
        return f"<CommentLike(comment_id={self.comment_id}, user_id={self.user_id})>"
