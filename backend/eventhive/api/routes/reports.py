"""
Report submission. Review happens under /api/admin/reports.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.user import User
from eventhive.schemas.report import ReportCreate, ReportResponse
from eventhive.services.report_service import submit_report
from eventhive.core.security import get_current_user

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def submit_report_endpoint(
    data: ReportCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Report a user or a facility (exactly one)."""
    return await submit_report(db, user, data)
