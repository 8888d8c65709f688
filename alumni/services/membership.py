# alumni/services/membership.py
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload

from alumni.core import permissions
from alumni.core.decorator import db_exception
from alumni.models.community import Community
from alumni.models.community_membership import CommunityMembership
from alumni.models.user import User
from alumni.services.community import CommunityService
from alumni.services.moderation import record_action
from alumni.utils.pagination import paginate

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("approved", "pending", "suspended")


class MembershipService:
    """
    Membership ledger transitions:

        pending   -> approved | rejected
        approved  -> suspended | left
        suspended -> approved (unsuspend or lapse)
        left / rejected -> pending | approved (row reused on rejoin)
    """

    def __init__(self, db: Session):
        self.db = db
        self.communities = CommunityService(db)

    # ==================== Helpers ====================

    def _load_target(
        self, membership_id: int, actor: User
    ) -> Tuple[CommunityMembership, Community]:
        membership = (
            self.db.query(CommunityMembership)
            .filter(CommunityMembership.id == membership_id)
            .first()
        )
        if not membership:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Membership not found",
            )
        community = self.communities.get_community_or_404(membership.community_id, actor)
        return membership, community

    def _authorize(
        self, actor: User, community: Community, action: str
    ) -> Optional[CommunityMembership]:
        actor_membership = self.communities.get_membership(community.id, actor.id)
        self.communities.ensure_can_manage(actor, community, actor_membership, action)
        return actor_membership

    @staticmethod
    def _guard_self(membership: CommunityMembership, actor: User, verb: str) -> None:
        if membership.user_id == actor.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot {verb} yourself",
            )

    @staticmethod
    def _guard_creator(membership: CommunityMembership, community: Community, verb: str):
        if membership.user_id == community.created_by:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot {verb} the community creator",
            )

    @staticmethod
    def _approve(membership: CommunityMembership, approver_id: Optional[int]) -> None:
        membership.status = "approved"
        membership.approved_by = approver_id
        if membership.joined_at is None:
            membership.joined_at = permissions.utcnow()
        membership.left_at = None

    @staticmethod
    def _clear_suspension(membership: CommunityMembership) -> None:
        membership.suspended_by = None
        membership.suspension_reason = None
        membership.suspension_end_date = None

    def _save(self, membership: CommunityMembership) -> CommunityMembership:
        self.db.commit()
        self.db.refresh(membership)
        return membership

    # ==================== Self-service ====================

    @db_exception
    def join(self, community_id: int, user: User) -> Tuple[CommunityMembership, str]:
        """Join an open community, request to join a closed/hidden one, or accept an invite."""
        community = self.communities.get_community_or_404(community_id, user)
        self.communities.ensure_active(community)

        membership = self.communities.get_membership(community.id, user.id)
        current = permissions.effective_status(membership)

        if current == "approved":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Already a member of this community",
            )
        if current == "suspended":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You are suspended from this community",
            )
        if current == "pending":
            if membership.invited_by is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Membership request already pending",
                )
            # The invitation is the approval
            self._approve(membership, membership.invited_by)
            record_action(
                self.db,
                community_id=community.id,
                actor_id=user.id,
                entity_type="membership",
                entity_id=membership.id,
                action="accept_invite",
            )
            logger.info(f"User {user.id} accepted invite to community {community.id}")
            return self._save(membership), "Invitation accepted"

        if membership is None:
            membership = CommunityMembership(community_id=community.id, user_id=user.id)
            self.db.add(membership)

        # Reused rows (left/rejected) start over as plain members
        membership.role = "member"
        membership.invited_by = None
        membership.approved_by = None
        membership.left_at = None
        self._clear_suspension(membership)

        if community.type == "open":
            self._approve(membership, None)
            message = "Successfully joined the community"
        else:
            membership.status = "pending"
            message = "Join request submitted"

        membership = self._save(membership)
        logger.info(
            f"User {user.id} join community {community.id}: status={membership.status}"
        )
        return membership, message

    def leave(self, community_id: int, user: User) -> CommunityMembership:
        community = self.communities.get_community_or_404(community_id, user)
        membership = self.communities.get_membership(community.id, user.id)

        if not permissions.is_active_member(membership):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You are not a member of this community",
            )
        if permissions.is_creator(user, community):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Community creator cannot leave the community",
            )

        membership.status = "left"
        membership.left_at = permissions.utcnow()
        self._clear_suspension(membership)
        logger.info(f"User {user.id} left community {community.id}")
        return self._save(membership)

    # ==================== Invitations ====================

    @db_exception
    def invite(self, community_id: int, invitee_id: int, actor: User) -> CommunityMembership:
        community = self.communities.get_community_or_404(community_id, actor)
        self.communities.ensure_active(community)

        actor_membership = self.communities.get_membership(community.id, actor.id)
        if not (
            permissions.can_invite(actor_membership)
            or permissions.is_creator(actor, community)
            or permissions.is_super_admin(actor)
        ):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions to invite members",
            )

        invitee = self.db.query(User).filter(User.id == invitee_id).first()
        if not invitee or not invitee.is_active or invitee.tenant_id != community.tenant_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )

        membership = self.communities.get_membership(community.id, invitee.id)
        if membership is not None and membership.status in ACTIVE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User is already a member of this community",
            )

        if membership is None:
            membership = CommunityMembership(community_id=community.id, user_id=invitee.id)
            self.db.add(membership)

        membership.role = "member"
        membership.status = "pending"
        membership.invited_by = actor.id
        membership.approved_by = None
        membership.left_at = None
        self._clear_suspension(membership)

        logger.info(
            f"User {actor.id} invited user {invitee.id} to community {community.id}"
        )
        return self._save(membership)

    # ==================== Moderation transitions ====================

    def approve(self, membership_id: int, actor: User) -> CommunityMembership:
        membership, community = self._load_target(membership_id, actor)
        self._authorize(actor, community, "approve membership")

        if membership.status == "approved":
            # Repeat approvals keep the original joined_at
            return membership
        if membership.status != "pending":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only pending memberships can be approved",
            )

        self._approve(membership, actor.id)
        record_action(
            self.db,
            community_id=community.id,
            actor_id=actor.id,
            entity_type="membership",
            entity_id=membership.id,
            action="approve",
        )
        return self._save(membership)

    def reject(self, membership_id: int, actor: User) -> CommunityMembership:
        membership, community = self._load_target(membership_id, actor)
        self._authorize(actor, community, "reject membership")

        if membership.status != "pending":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only pending memberships can be rejected",
            )

        membership.status = "rejected"
        record_action(
            self.db,
            community_id=community.id,
            actor_id=actor.id,
            entity_type="membership",
            entity_id=membership.id,
            action="reject",
        )
        return self._save(membership)

    def suspend(
        self,
        membership_id: int,
        actor: User,
        reason: str,
        end_date: Optional[datetime] = None,
    ) -> CommunityMembership:
        membership, community = self._load_target(membership_id, actor)
        self._guard_self(membership, actor, "suspend")
        self._authorize(actor, community, "suspend member")
        self._guard_creator(membership, community, "suspend")

        reason = (reason or "").strip()
        if not reason or len(reason) > 200:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Suspension reason must be between 1 and 200 characters",
            )

        end_date = permissions.as_aware(end_date)
        if end_date is not None and end_date <= permissions.utcnow():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Suspension end date must be in the future",
            )

        if not permissions.is_active_member(membership):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only approved members can be suspended",
            )

        membership.status = "suspended"
        membership.suspended_by = actor.id
        membership.suspension_reason = reason
        membership.suspension_end_date = end_date
        record_action(
            self.db,
            community_id=community.id,
            actor_id=actor.id,
            entity_type="membership",
            entity_id=membership.id,
            action="suspend",
            reason=reason,
        )
        return self._save(membership)

    def unsuspend(self, membership_id: int, actor: User) -> CommunityMembership:
        membership, community = self._load_target(membership_id, actor)
        self._authorize(actor, community, "unsuspend member")

        if membership.status != "suspended":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Membership is not suspended",
            )

        membership.status = "approved"
        self._clear_suspension(membership)
        record_action(
            self.db,
            community_id=community.id,
            actor_id=actor.id,
            entity_type="membership",
            entity_id=membership.id,
            action="unsuspend",
        )
        return self._save(membership)

    def promote(self, membership_id: int, actor: User) -> CommunityMembership:
        membership, community = self._load_target(membership_id, actor)
        self._authorize(actor, community, "promote member")

        if not permissions.is_active_member(membership):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only approved members can be promoted",
            )
        if membership.role != "member":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User is already a moderator",
            )

        membership.role = "moderator"
        record_action(
            self.db,
            community_id=community.id,
            actor_id=actor.id,
            entity_type="membership",
            entity_id=membership.id,
            action="promote",
        )
        return self._save(membership)

    def demote(self, membership_id: int, actor: User) -> CommunityMembership:
        membership, community = self._load_target(membership_id, actor)
        self._guard_self(membership, actor, "demote")
        self._authorize(actor, community, "demote moderator")
        self._guard_creator(membership, community, "demote")

        if membership.role == "member":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User is not a moderator",
            )

        membership.role = "member"
        record_action(
            self.db,
            community_id=community.id,
            actor_id=actor.id,
            entity_type="membership",
            entity_id=membership.id,
            action="demote",
        )
        return self._save(membership)

    def remove(self, membership_id: int, actor: User) -> CommunityMembership:
        membership, community = self._load_target(membership_id, actor)
        self._guard_self(membership, actor, "remove")
        self._authorize(actor, community, "remove member")
        self._guard_creator(membership, community, "remove")

        if membership.status == "left":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User is not a member of this community",
            )

        membership.status = "left"
        membership.left_at = permissions.utcnow()
        self._clear_suspension(membership)
        record_action(
            self.db,
            community_id=community.id,
            actor_id=actor.id,
            entity_type="membership",
            entity_id=membership.id,
            action="remove",
        )
        return self._save(membership)

    # ==================== Listings ====================

    def list_pending(
        self, community_id: int, actor: User, page: int = 1, size: int = 20
    ) -> Tuple[List[CommunityMembership], dict]:
        community = self.communities.get_community_or_404(community_id, actor)
        self._authorize(actor, community, "view membership requests")

        query = (
            self.db.query(CommunityMembership)
            .options(selectinload(CommunityMembership.user))
            .filter(
                CommunityMembership.community_id == community.id,
                CommunityMembership.status == "pending",
            )
            .order_by(CommunityMembership.created_at.asc(), CommunityMembership.id.asc())
        )
        return paginate(query, page, size)

    def list_members(
        self,
        community_id: int,
        actor: User,
        page: int = 1,
        size: int = 20,
        status_filter: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Tuple[List[CommunityMembership], dict]:
        community = self.communities.get_community_or_404(community_id, actor)
        actor_membership = self.communities.get_membership(community.id, actor.id)
        self.communities.ensure_can_view(actor, community, actor_membership)

        # Only managers see anything other than approved members
        if status_filter and status_filter != "approved":
            self.communities.ensure_can_manage(
                actor, community, actor_membership, "view membership requests"
            )

        query = (
            self.db.query(CommunityMembership)
            .options(selectinload(CommunityMembership.user))
            .filter(
                CommunityMembership.community_id == community.id,
                CommunityMembership.status == (status_filter or "approved"),
            )
        )
        if role:
            query = query.filter(CommunityMembership.role == role)

        query = query.order_by(CommunityMembership.joined_at.asc(), CommunityMembership.id.asc())
        return paginate(query, page, size)

    def list_moderators(self, community_id: int, actor: User) -> List[CommunityMembership]:
        community = self.communities.get_community_or_404(community_id, actor)
        actor_membership = self.communities.get_membership(community.id, actor.id)
        self.communities.ensure_can_view(actor, community, actor_membership)

        return (
            self.db.query(CommunityMembership)
            .options(selectinload(CommunityMembership.user))
            .filter(
                CommunityMembership.community_id == community.id,
                CommunityMembership.status == "approved",
                CommunityMembership.role.in_(("moderator", "admin")),
            )
            .order_by(CommunityMembership.id.asc())
            .all()
        )

    def my_memberships(
        self,
        user: User,
        page: int = 1,
        size: int = 20,
        status_filter: Optional[str] = None,
    ) -> Tuple[List[CommunityMembership], dict]:
        query = self.db.query(CommunityMembership).filter(
            CommunityMembership.user_id == user.id
        )
        if status_filter:
            query = query.filter(CommunityMembership.status == status_filter)
        query = query.order_by(CommunityMembership.created_at.desc(), CommunityMembership.id.desc())
        return paginate(query, page, size)

    # ==================== Housekeeping ====================

    def release_expired_suspensions(self, now: Optional[datetime] = None) -> int:
        """Persist lapsed suspensions as approved. Returns how many were lifted."""
        now = now or permissions.utcnow()
        candidates = (
            self.db.query(CommunityMembership)
            .filter(
                CommunityMembership.status == "suspended",
                CommunityMembership.suspension_end_date.isnot(None),
            )
            .all()
        )

        released = 0
        for membership in candidates:
            if not permissions.suspension_lapsed(membership, now):
                continue
            membership.status = "approved"
            self._clear_suspension(membership)
            record_action(
                self.db,
                community_id=membership.community_id,
                actor_id=None,
                entity_type="membership",
                entity_id=membership.id,
                action="suspension_expired",
            )
            released += 1

        if released:
            self.db.commit()
        return released
