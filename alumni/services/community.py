# alumni/services/community.py
import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import String, and_, cast, or_
from sqlalchemy.orm import Session, selectinload

from alumni.core import permissions
from alumni.core.decorator import db_exception
from alumni.models.category import Category
from alumni.models.community import COMMUNITY_SETTINGS, Community
from alumni.models.community_membership import CommunityMembership
from alumni.models.user import User
from alumni.schemas.community import CommunityCreate, CommunityUpdate
from alumni.services.moderation import record_action
from alumni.utils.pagination import paginate

logger = logging.getLogger(__name__)

# Nullable columns; an explicit null on the others is ignored
CLEARABLE_FIELDS = ("cover_image", "category_id")


class CommunityService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Access helpers ====================

    def get_membership(
        self, community_id: int, user_id: Optional[int]
    ) -> Optional[CommunityMembership]:
        if user_id is None:
            return None
        return (
            self.db.query(CommunityMembership)
            .filter(
                and_(
                    CommunityMembership.community_id == community_id,
                    CommunityMembership.user_id == user_id,
                )
            )
            .first()
        )

    def get_community_or_404(self, community_id: int, user: User) -> Community:
        """Communities in other tenants are reported as missing."""
        community = (
            self.db.query(Community)
            .options(selectinload(Community.moderator_memberships))
            .filter(Community.id == community_id)
            .first()
        )
        if not community or not permissions.same_tenant(user, community.tenant_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Community not found",
            )
        return community

    @staticmethod
    def ensure_active(community: Community) -> None:
        if community.is_archived:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Community is archived",
            )

    @staticmethod
    def ensure_can_manage(
        user: User,
        community: Community,
        membership: Optional[CommunityMembership],
        action: str,
    ) -> None:
        if not permissions.can_manage(user, community, membership):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions to {action}",
            )

    @staticmethod
    def ensure_can_view(
        user: User, community: Community, membership: Optional[CommunityMembership]
    ) -> None:
        if not permissions.can_view_content(user, community, membership):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You must be a member to view this community's content",
            )

    def _attach_viewer_membership(
        self, community: Community, membership: Optional[CommunityMembership]
    ) -> Community:
        community.membership_status = permissions.effective_status(membership)
        community.membership_role = membership.role if membership else None
        return community

    def _validate_category(self, category_id: Optional[int], tenant_id) -> None:
        if category_id is None:
            return
        category = (
            self.db.query(Category)
            .filter(
                Category.id == category_id,
                Category.entity_type == "community",
                Category.tenant_id == tenant_id,
            )
            .first()
        )
        if not category:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid community category",
            )

    def _name_taken(self, name: str, tenant_id, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Community).filter(
            Community.tenant_id == tenant_id, Community.name == name
        )
        if exclude_id is not None:
            query = query.filter(Community.id != exclude_id)
        return query.first() is not None

    # ==================== Operations ====================

    @db_exception
    def create_community(self, community_in: CommunityCreate, user: User) -> Community:
        """Create a community; the creator becomes its approved admin."""
        if user.role not in permissions.COMMUNITY_CREATOR_ROLES:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions to create community",
            )

        if self._name_taken(community_in.name, user.tenant_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Community with this name already exists",
            )

        self._validate_category(community_in.category_id, user.tenant_id)

        data = community_in.model_dump(exclude={"settings"})
        community = Community(
            **data,
            **community_in.settings.model_dump(),
            tenant_id=user.tenant_id,
            created_by=user.id,
            status="active",
        )
        self.db.add(community)
        self.db.flush()

        now = permissions.utcnow()
        membership = CommunityMembership(
            community_id=community.id,
            user_id=user.id,
            role="admin",
            status="approved",
            approved_by=user.id,
            joined_at=now,
        )
        self.db.add(membership)

        self.db.commit()
        self.db.refresh(community)
        logger.info(f"Community {community.id} created by user {user.id}")

        return self._attach_viewer_membership(community, membership)

    def get_community(self, community_id: int, user: User) -> Community:
        community = self.get_community_or_404(community_id, user)
        membership = self.get_membership(community.id, user.id)

        if community.type == "hidden" and not (
            permissions.is_super_admin(user)
            or permissions.is_creator(user, community)
            or permissions.is_active_member(membership)
        ):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. This is a hidden community.",
            )

        return self._attach_viewer_membership(community, membership)

    def list_communities(
        self,
        user: User,
        page: int = 1,
        size: int = 20,
        q: Optional[str] = None,
        community_type: Optional[str] = None,
        tag: Optional[str] = None,
        category_id: Optional[int] = None,
        include_archived: bool = False,
    ) -> Tuple[List[Community], dict]:
        """Tenant-scoped community search. Hidden communities only show to members."""
        query = self.db.query(Community).options(
            selectinload(Community.moderator_memberships)
        )

        if not permissions.is_super_admin(user):
            # Same rule as get_community: lapsed suspensions count, live ones do not
            candidates = self.db.query(CommunityMembership).filter(
                CommunityMembership.user_id == user.id,
                CommunityMembership.status.in_(("approved", "suspended")),
            )
            member_of = [
                membership.community_id
                for membership in candidates
                if permissions.is_active_member(membership)
            ]
            query = query.filter(
                Community.tenant_id == user.tenant_id,
                or_(
                    Community.type != "hidden",
                    Community.created_by == user.id,
                    Community.id.in_(member_of),
                ),
            )

        if not include_archived:
            query = query.filter(Community.status == "active")

        if q:
            query = query.filter(
                or_(
                    Community.name.ilike(f"%{q}%"),
                    Community.description.ilike(f"%{q}%"),
                )
            )

        if community_type:
            query = query.filter(Community.type == community_type)

        if tag:
            # tags are stored as a JSON array; match the quoted element
            query = query.filter(cast(Community.tags, String).ilike(f'%"{tag}"%'))

        if category_id:
            query = query.filter(Community.category_id == category_id)

        query = query.order_by(Community.created_at.desc(), Community.id.desc())
        communities, pagination = paginate(query, page, size)

        for community in communities:
            self._attach_viewer_membership(
                community, self.get_membership(community.id, user.id)
            )

        return communities, pagination

    @db_exception
    def update_community(
        self, community_id: int, community_in: CommunityUpdate, user: User
    ) -> Community:
        community = self.get_community_or_404(community_id, user)
        membership = self.get_membership(community.id, user.id)
        self.ensure_can_manage(user, community, membership, "update community")

        updates = {
            field: value
            for field, value in community_in.model_dump(
                exclude_unset=True, exclude={"settings"}
            ).items()
            if value is not None or field in CLEARABLE_FIELDS
        }

        if "name" in updates and self._name_taken(
            updates["name"], community.tenant_id, exclude_id=community.id
        ):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Community with this name already exists",
            )

        if updates.get("category_id") is not None:
            self._validate_category(updates["category_id"], community.tenant_id)

        for field, value in updates.items():
            setattr(community, field, value)

        # Settings are merged key by key
        if community_in.settings is not None:
            for key, value in community_in.settings.model_dump(exclude_unset=True).items():
                if key in COMMUNITY_SETTINGS and value is not None:
                    setattr(community, key, value)

        self.db.commit()
        self.db.refresh(community)

        return self._attach_viewer_membership(community, membership)

    def archive_community(self, community_id: int, user: User) -> Community:
        """Soft delete: only the creator or a super admin may archive."""
        community = self.get_community_or_404(community_id, user)

        if not (
            permissions.is_creator(user, community) or permissions.is_super_admin(user)
        ):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions to delete community",
            )

        community.status = "archived"
        record_action(
            self.db,
            community_id=community.id,
            actor_id=user.id,
            entity_type="community",
            entity_id=community.id,
            action="archive",
        )
        self.db.commit()
        self.db.refresh(community)
        logger.info(f"Community {community.id} archived by user {user.id}")

        return community
