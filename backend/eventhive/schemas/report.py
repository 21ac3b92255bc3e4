"""
Pydantic schemas for moderation reports.

Target selection (exactly one of user / facility) is checked in the report
service so that a bad request surfaces as a Validation error, not a 422.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from eventhive.models.enums import ReportStatus, ReportType


class ReportCreate(BaseModel):
    report_type: ReportType
    reason: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    evidence: list[str] = Field(default_factory=list, max_length=10)
    target_user_id: Optional[int] = None
    target_facility_id: Optional[int] = None


class ReportStatusUpdate(BaseModel):
    status: ReportStatus
    review_notes: Optional[str] = Field(None, max_length=5000)
    action_taken: Optional[str] = Field(None, max_length=500)


class ReportResponse(BaseModel):
    id: int
    report_type: str
    reason: str
    description: Optional[str]
    evidence: list[str]
    status: str
    reporter_id: int
    target_user_id: Optional[int] = None
    target_facility_id: Optional[int] = None
    reviewed_by_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    action_taken: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ReportStats(BaseModel):
    total: int
    by_status: dict[str, int]
    by_type: dict[str, int]
