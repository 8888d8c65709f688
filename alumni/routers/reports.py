# alumni/routers/reports.py
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from alumni.core.config import settings
from alumni.core.database import get_db
from alumni.core.dependencies import get_current_user
from alumni.models.user import User
from alumni.schemas.common import ApiResponse, Page
from alumni.schemas.report import ReportCreate, ReportResponse, ReportStatusUpdate
from alumni.services.report import ReportService

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=ApiResponse[ReportResponse], status_code=201)
def create_report(
    report_in: ReportCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Report a post or comment. One report per user per item."""
    service = ReportService(db)
    report = service.create_report(report_in, current_user)
    return {"success": True, "message": "Report submitted successfully", "data": report}


@router.get("/me", response_model=ApiResponse[Page[ReportResponse]])
def my_reports(
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = ReportService(db)
    reports, pagination = service.my_reports(current_user, page, size)
    return {"success": True, "data": {"items": reports, **pagination}}


@router.get("/pending", response_model=ApiResponse[Page[ReportResponse]])
def pending_reports(
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Pending reports, oldest first. Super admins and college admins only."""
    service = ReportService(db)
    reports, pagination = service.pending_reports(current_user, page, size)
    return {"success": True, "data": {"items": reports, **pagination}}


@router.get("/community/{community_id}", response_model=ApiResponse[Page[ReportResponse]])
def community_reports(
    community_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    status: Optional[str] = Query(None, pattern="^(pending|reviewed|resolved|dismissed)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = ReportService(db)
    reports, pagination = service.community_reports(
        community_id, current_user, page, size, status_filter=status
    )
    return {"success": True, "data": {"items": reports, **pagination}}


@router.get(
    "/entity/{entity_type}/{entity_id}",
    response_model=ApiResponse[Page[ReportResponse]],
)
def entity_reports(
    entity_id: int,
    entity_type: str = Path(..., pattern="^(post|comment)$"),
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = ReportService(db)
    reports, pagination = service.entity_reports(
        entity_type, entity_id, current_user, page, size
    )
    return {"success": True, "data": {"items": reports, **pagination}}


@router.patch("/{report_id}/status", response_model=ApiResponse[ReportResponse])
def update_report_status(
    report_id: int,
    update_in: ReportStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Triage a pending report. Super admins only."""
    service = ReportService(db)
    report = service.update_status(report_id, update_in, current_user)
    return {"success": True, "message": "Report status updated", "data": report}
