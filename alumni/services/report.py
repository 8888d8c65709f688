# alumni/services/report.py
import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from alumni.core import permissions
from alumni.core.decorator import db_exception
from alumni.models.community import Community
from alumni.models.community_comment import CommunityComment
from alumni.models.community_post import CommunityPost
from alumni.models.report import Report
from alumni.models.user import User
from alumni.schemas.report import ReportCreate, ReportStatusUpdate
from alumni.services.community import CommunityService
from alumni.services.moderation import record_action
from alumni.utils.pagination import paginate

logger = logging.getLogger(__name__)


class ReportService:
    """
    Anyone may file a report and community managers may read them, but
    only a super admin moves a report out of ``pending``.
    """

    def __init__(self, db: Session):
        self.db = db
        self.communities = CommunityService(db)

    def _resolve_entity(self, entity_type: str, entity_id: int) -> Tuple[int, int]:
        """Return (author_id, community_id) of the reported content."""
        if entity_type == "post":
            post = self.db.query(CommunityPost).filter(CommunityPost.id == entity_id).first()
            if not post or post.status == "deleted":
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND, detail="Post not found"
                )
            return post.author_id, post.community_id

        comment = (
            self.db.query(CommunityComment).filter(CommunityComment.id == entity_id).first()
        )
        if not comment or comment.status == "deleted":
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found"
            )
        post = self.db.query(CommunityPost).filter(CommunityPost.id == comment.post_id).first()
        return comment.author_id, post.community_id

    @db_exception
    def create_report(self, report_in: ReportCreate, user: User) -> Report:
        author_id, community_id = self._resolve_entity(
            report_in.entity_type, report_in.entity_id
        )
        # Content from another tenant is reported as missing
        self.communities.get_community_or_404(community_id, user)

        if author_id == user.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"You cannot report your own {report_in.entity_type}",
            )

        duplicate = (
            self.db.query(Report)
            .filter(
                Report.reporter_id == user.id,
                Report.entity_type == report_in.entity_type,
                Report.entity_id == report_in.entity_id,
            )
            .first()
        )
        if duplicate:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You have already reported this content",
            )

        report = Report(
            reporter_id=user.id,
            community_id=community_id,
            entity_type=report_in.entity_type,
            entity_id=report_in.entity_id,
            reason=report_in.reason,
            description=report_in.description,
            status="pending",
        )
        self.db.add(report)
        self.db.commit()
        self.db.refresh(report)

        logger.info(
            f"Report created: id={report.id} {report.entity_type}={report.entity_id} "
            f"reason={report.reason} reporter={user.id}"
        )
        return report

    def entity_reports(
        self, entity_type: str, entity_id: int, user: User, page: int = 1, size: int = 20
    ) -> Tuple[List[Report], dict]:
        _, community_id = self._resolve_entity(entity_type, entity_id)
        community = self.communities.get_community_or_404(community_id, user)
        membership = self.communities.get_membership(community.id, user.id)
        if not (
            permissions.can_moderate(membership) or permissions.is_super_admin(user)
        ):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions to view reports",
            )

        query = (
            self.db.query(Report)
            .filter(Report.entity_type == entity_type, Report.entity_id == entity_id)
            .order_by(Report.created_at.desc(), Report.id.desc())
        )
        return paginate(query, page, size)

    def pending_reports(
        self, user: User, page: int = 1, size: int = 20
    ) -> Tuple[List[Report], dict]:
        if user.role not in ("super_admin", "college_admin"):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions to view reports",
            )

        query = self.db.query(Report).filter(Report.status == "pending")
        if not permissions.is_super_admin(user):
            query = query.join(Community, Community.id == Report.community_id).filter(
                Community.tenant_id == user.tenant_id
            )
        query = query.order_by(Report.created_at.asc(), Report.id.asc())
        return paginate(query, page, size)

    def community_reports(
        self,
        community_id: int,
        user: User,
        page: int = 1,
        size: int = 20,
        status_filter: Optional[str] = None,
    ) -> Tuple[List[Report], dict]:
        community = self.communities.get_community_or_404(community_id, user)
        membership = self.communities.get_membership(community.id, user.id)
        if not (
            permissions.can_manage(user, community, membership)
            or user.role == "college_admin"
        ):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions to view reports",
            )

        query = self.db.query(Report).filter(Report.community_id == community.id)
        if status_filter:
            query = query.filter(Report.status == status_filter)
        query = query.order_by(Report.created_at.desc(), Report.id.desc())
        return paginate(query, page, size)

    def my_reports(self, user: User, page: int = 1, size: int = 20) -> Tuple[List[Report], dict]:
        query = (
            self.db.query(Report)
            .filter(Report.reporter_id == user.id)
            .order_by(Report.created_at.desc(), Report.id.desc())
        )
        return paginate(query, page, size)

    def update_status(
        self, report_id: int, update_in: ReportStatusUpdate, user: User
    ) -> Report:
        if not permissions.is_super_admin(user):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only super admins can update report status",
            )

        report = self.db.query(Report).filter(Report.id == report_id).first()
        if not report:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Report not found"
            )
        if report.status != "pending":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Report has already been reviewed",
            )

        report.status = update_in.status
        report.resolution = update_in.resolution
        report.reviewed_by = user.id
        report.reviewed_at = permissions.utcnow()
        record_action(
            self.db,
            community_id=report.community_id,
            actor_id=user.id,
            entity_type="report",
            entity_id=report.id,
            action=update_in.status,
            reason=update_in.resolution,
        )
        self.db.commit()
        self.db.refresh(report)
        logger.info(f"Report {report.id} marked {report.status} by user {user.id}")
        return report
