"""
Admin-only endpoints: moderation queue, facility approval, the user directory
with bans, and the on-demand reservation sweep.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.enums import ReportStatus, UserRole
from eventhive.models.user import User
from eventhive.schemas.facility import FacilityReject, FacilityResponse
from eventhive.schemas.payment import CleanupResponse
from eventhive.schemas.report import ReportResponse, ReportStats, ReportStatusUpdate
from eventhive.schemas.user import UserResponse
from eventhive.services import facility_service, report_service
from eventhive.services.reservation_sweeper import cleanup_expired_reservations
from eventhive.services.user_service import list_users, set_user_banned
from eventhive.core.security import get_current_admin

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/reports")
async def list_reports_endpoint(
    status: Optional[ReportStatus] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    reports, total = await report_service.list_reports(db, status, page, page_size)
    return {
        "reports": [ReportResponse.model_validate(r) for r in reports],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@router.get("/reports/stats", response_model=ReportStats)
async def report_stats_endpoint(
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await report_service.get_report_stats(db)


@router.patch("/reports/{report_id}", response_model=ReportResponse)
async def update_report_endpoint(
    report_id: int,
    data: ReportStatusUpdate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await report_service.update_report_status(db, report_id, data, admin)


@router.delete("/reports/{report_id}")
async def delete_report_endpoint(
    report_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    await report_service.delete_report(db, report_id, admin)
    return {"success": True}


@router.post("/facilities/{facility_id}/approve", response_model=FacilityResponse)
async def approve_facility_endpoint(
    facility_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await facility_service.approve_facility(db, facility_id, admin)


@router.post("/facilities/{facility_id}/reject", response_model=FacilityResponse)
async def reject_facility_endpoint(
    facility_id: int,
    data: FacilityReject,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await facility_service.reject_facility(db, facility_id, admin, data.reason)


@router.get("/users", response_model=list[UserResponse])
async def list_users_endpoint(
    search: Optional[str] = Query(None, max_length=100),
    role: Optional[UserRole] = None,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await list_users(db, search, role)


@router.post("/users/{user_id}/ban", response_model=UserResponse)
async def ban_user_endpoint(
    user_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await set_user_banned(db, admin, user_id, banned=True)


@router.post("/users/{user_id}/unban", response_model=UserResponse)
async def unban_user_endpoint(
    user_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await set_user_banned(db, admin, user_id, banned=False)


@router.post("/reservations/cleanup", response_model=CleanupResponse)
async def cleanup_reservations_endpoint(
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Run the expiration sweep now instead of waiting for the background task."""
    cancelled = await cleanup_expired_reservations(db)
    return CleanupResponse(cancelled=cancelled)
