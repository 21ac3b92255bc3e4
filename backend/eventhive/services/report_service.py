"""
Moderation reports against users or facilities.

Report status is a free-form field: admins may move a report from any status
to any other. Each review stamps who reviewed it and when.
"""

from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.models.enums import ReportStatus
from eventhive.models.facility import Facility
from eventhive.models.report import Report
from eventhive.models.user import User
from eventhive.schemas.report import ReportCreate, ReportStatusUpdate
from eventhive.core.clock import utcnow
from eventhive.core.exceptions import NotFoundError, ValidationError
from eventhive.core.logging import get_logger
from eventhive.core.metrics import reports_submitted

logger = get_logger(__name__)


async def submit_report(db: AsyncSession, reporter: User, data: ReportCreate) -> Report:
    """Exactly one of target_user_id / target_facility_id must be set, and must exist."""
    has_user = data.target_user_id is not None
    has_facility = data.target_facility_id is not None
    if has_user == has_facility:
        raise ValidationError("Specify exactly one of target_user_id or target_facility_id")

    if has_user:
        if data.target_user_id == reporter.id:
            raise ValidationError("You cannot report yourself")
        if await db.get(User, data.target_user_id) is None:
            raise NotFoundError("Reported user not found")
        target = "user"
    else:
        if await db.get(Facility, data.target_facility_id) is None:
            raise NotFoundError("Reported facility not found")
        target = "facility"

    report = Report(
        report_type=data.report_type.value,
        reason=data.reason,
        description=data.description,
        evidence=list(data.evidence),
        status=ReportStatus.PENDING.value,
        reporter_id=reporter.id,
        target_user_id=data.target_user_id,
        target_facility_id=data.target_facility_id,
    )
    db.add(report)
    await db.flush()
    await db.refresh(report)

    reports_submitted.labels(target=target).inc()
    logger.info("report_submitted", report_id=report.id, reporter_id=reporter.id, target=target)
    return report


async def list_reports(
    db: AsyncSession,
    status: Optional[ReportStatus] = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Report], int]:
    query = select(Report)
    if status is not None:
        query = query.where(Report.status == status.value)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()
    result = await db.execute(
        query.order_by(Report.created_at.desc(), Report.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def get_report(db: AsyncSession, report_id: int) -> Report:
    report = await db.get(Report, report_id)
    if not report:
        raise NotFoundError("Report not found")
    return report


async def update_report_status(
    db: AsyncSession,
    report_id: int,
    data: ReportStatusUpdate,
    admin: User,
) -> Report:
    report = await get_report(db, report_id)
    previous = report.status

    report.status = data.status.value
    report.reviewed_by_id = admin.id
    report.reviewed_at = utcnow()
    if data.review_notes is not None:
        report.review_notes = data.review_notes
    if data.action_taken is not None:
        report.action_taken = data.action_taken

    await db.flush()
    await db.refresh(report)
    logger.info(
        "report_status_updated",
        report_id=report.id,
        previous=previous,
        status=report.status,
        admin_id=admin.id,
    )
    return report


async def delete_report(db: AsyncSession, report_id: int, admin: User) -> None:
    report = await get_report(db, report_id)
    await db.delete(report)
    await db.flush()
    logger.info("report_deleted", report_id=report_id, admin_id=admin.id)


async def get_report_stats(db: AsyncSession) -> dict:
    by_status = dict((await db.execute(
        select(Report.status, func.count(Report.id)).group_by(Report.status)
    )).all())
    by_type = dict((await db.execute(
        select(Report.report_type, func.count(Report.id)).group_by(Report.report_type)
    )).all())

    return {
        "total": sum(by_status.values()),
        "by_status": {status.value: by_status.get(status.value, 0) for status in ReportStatus},
        "by_type": by_type,
    }
