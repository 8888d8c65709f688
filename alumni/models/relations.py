# alumni/models/relations.py

from sqlalchemy import and_, func, select
from sqlalchemy.orm import aliased, column_property, relationship

# Import all relevant models
from .category import Category
from .community import Community
from .community_comment import CommunityComment
from .community_membership import CommunityMembership
from .community_post import CommunityPost
from .like import CommentLike, PostLike
from .poll import PollOption, PollVote
from .report import Report
from .tenant import Tenant
from .user import User

MODERATOR_ROLES = ("moderator", "admin")


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # --- Tenant ---

    # 1. Tenant to Users / Communities (One-to-Many)
    Tenant.users = relationship("User", back_populates="tenant")
    User.tenant = relationship("Tenant", back_populates="users")

    Tenant.communities = relationship("Community", back_populates="tenant")
    Community.tenant = relationship("Tenant", back_populates="communities")

    # --- Community System Relationships ---

    # 2. Community creator
    Community.creator = relationship("User", foreign_keys=[Community.created_by])

    # 3. Community category (entity_type='community')
    Community.category = relationship("Category", foreign_keys=[Community.category_id])

    # 4. Community to Memberships (One-to-Many)
    Community.memberships = relationship(
        "CommunityMembership",
        back_populates="community",
        cascade="all, delete-orphan",
    )
    CommunityMembership.community = relationship(
        "Community", back_populates="memberships"
    )

    # 5. User to Memberships (One-to-Many)
    User.community_memberships = relationship(
        "CommunityMembership",
        back_populates="user",
        foreign_keys=[CommunityMembership.user_id],
    )
    CommunityMembership.user = relationship(
        "User",
        back_populates="community_memberships",
        foreign_keys=[CommunityMembership.user_id],
    )

    # 6. Moderators are whoever holds an approved moderator/admin membership
    Community.moderator_memberships = relationship(
        CommunityMembership,
        primaryjoin=and_(
            CommunityMembership.community_id == Community.id,
            CommunityMembership.status == "approved",
            CommunityMembership.role.in_(MODERATOR_ROLES),
        ),
        viewonly=True,
        order_by=CommunityMembership.id,
    )

    # 7. Community to Posts (One-to-Many)
    Community.posts = relationship(
        "CommunityPost",
        back_populates="community",
        cascade="all, delete-orphan",
        order_by="CommunityPost.created_at.desc()",
    )
    CommunityPost.community = relationship("Community", back_populates="posts")

    # 8. User to Posts (One-to-Many)
    User.community_posts = relationship("CommunityPost", back_populates="author")
    CommunityPost.author = relationship("User", back_populates="community_posts")

    # 9. Post to Poll options / votes (One-to-Many)
    CommunityPost.poll_options = relationship(
        "PollOption",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="PollOption.position",
    )
    PollOption.post = relationship("CommunityPost", back_populates="poll_options")
    PollOption.votes = relationship(
        "PollVote", back_populates="option", cascade="all, delete-orphan"
    )
    PollVote.option = relationship("PollOption", back_populates="votes")

    # 10. Post to Comments (One-to-Many)
    CommunityPost.comments = relationship(
        "CommunityComment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="CommunityComment.created_at",
    )
    CommunityComment.post = relationship("CommunityPost", back_populates="comments")

    # 11. User to Comments (One-to-Many)
    User.community_comments = relationship(
        "CommunityComment", back_populates="author"
    )
    CommunityComment.author = relationship(
        "User", back_populates="community_comments"
    )

    # 12. Comment self-referential (one level of replies)
    CommunityComment.parent = relationship(
        "CommunityComment",
        remote_side=[CommunityComment.id],
        back_populates="replies",
    )
    CommunityComment.replies = relationship(
        "CommunityComment",
        back_populates="parent",
        order_by="CommunityComment.created_at",
    )

    # 13. Likes (canonical store; counts below are derived from these rows)
    PostLike.post = relationship("CommunityPost")
    PostLike.user = relationship("User")
    CommentLike.comment = relationship("CommunityComment")

    # 14. Reports
    Report.reporter = relationship("User", foreign_keys=[Report.reporter_id])
    Report.reviewer = relationship("User", foreign_keys=[Report.reviewed_by])

    # 15. Category owner tenant
    Category.tenant = relationship("Tenant")

    setup_derived_counters()


def setup_derived_counters():
    """
    Counters are correlated subqueries over the canonical rows, so they
    always equal the number of backing records.
    """

    Community.member_count = column_property(
        select(func.count(CommunityMembership.id))
        .where(
            CommunityMembership.community_id == Community.id,
            CommunityMembership.status == "approved",
        )
        .correlate_except(CommunityMembership)
        .scalar_subquery()
    )

    Community.post_count = column_property(
        select(func.count(CommunityPost.id))
        .where(
            CommunityPost.community_id == Community.id,
            CommunityPost.status != "deleted",
        )
        .correlate_except(CommunityPost)
        .scalar_subquery()
    )

    CommunityPost.like_count = column_property(
        select(func.count(PostLike.id))
        .where(PostLike.post_id == CommunityPost.id)
        .correlate_except(PostLike)
        .scalar_subquery()
    )

    CommunityPost.comment_count = column_property(
        select(func.count(CommunityComment.id))
        .where(
            CommunityComment.post_id == CommunityPost.id,
            CommunityComment.status == "approved",
        )
        .correlate_except(CommunityComment)
        .scalar_subquery()
    )

    CommunityComment.like_count = column_property(
        select(func.count(CommentLike.id))
        .where(CommentLike.comment_id == CommunityComment.id)
        .correlate_except(CommentLike)
        .scalar_subquery()
    )

    reply = aliased(CommunityComment)
    CommunityComment.reply_count = column_property(
        select(func.count(reply.id))
        .where(
            reply.parent_comment_id == CommunityComment.id,
            reply.status == "approved",
        )
        .correlate_except(reply)
        .scalar_subquery()
    )

    PollOption.vote_count = column_property(
        select(func.count(PollVote.id))
        .where(PollVote.option_id == PollOption.id)
        .correlate_except(PollVote)
        .scalar_subquery()
    )
