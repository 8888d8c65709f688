"""
Models package initialization
Import all models and setup relationships
"""

from .category import Category
from .community import Community
from .community_comment import CommunityComment
from .community_membership import CommunityMembership
from .community_post import CommunityPost
from .event import Event
from .job_post import JobPost
from .like import CommentLike, PostLike
from .moderation_action import ModerationAction
from .poll import PollOption, PollVote

# Import and setup relationships
from .relations import setup_relationships
from .report import Report
from .tenant import Tenant
from .user import User

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "Category",
    "Community",
    "CommunityComment",
    "CommunityMembership",
    "CommunityPost",
    "CommentLike",
    "Event",
    "JobPost",
    "ModerationAction",
    "PollOption",
    "PollVote",
    "PostLike",
    "Report",
    "Tenant",
    "User",
]
