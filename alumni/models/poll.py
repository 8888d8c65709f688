# alumni/models/poll.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from alumni.core.database import Base


class PollOption(Base):
    __tablename__ = "poll_options"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(
        Integer, ForeignKey("community_posts.id"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False)  # index the client votes with
    text = Column(String(200), nullable=False)

    __table_args__ = (
        UniqueConstraint("post_id", "position", name="unique_poll_option_position"),
    )

    def __repr__(self):
        return f"<PollOption(post_id={self.post_id}, position={self.position})>"


class PollVote(Base):
    __tablename__ = "poll_votes"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(
        Integer, ForeignKey("community_posts.id"), nullable=False, index=True
    )
    option_id = Column(
        Integer, ForeignKey("poll_options.id"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Single choice: one vote per user per poll
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="unique_poll_vote"),)

    def __repr__(self):
        return f"<PollVote(post_id={self.post_id}, user_id={self.user_id}, option_id={self.option_id})>"
