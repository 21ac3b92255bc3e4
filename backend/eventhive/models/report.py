"""
User-submitted moderation reports.

A report targets exactly one user or one facility; the CHECK constraint backs
up the service-level validation. Status is deliberately free-form: an admin may
set any status from any status.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from eventhive.db.base import Base, TimestampMixin
from eventhive.models.enums import ReportStatus, ReportType, sql_in


class Report(Base, TimestampMixin):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    report_type = Column(String(30), nullable=False)
    reason = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    evidence = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default=ReportStatus.PENDING.value, index=True)
    reporter_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    target_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    target_facility_id = Column(Integer, ForeignKey("facilities.id", ondelete="CASCADE"), nullable=True)
    reviewed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_notes = Column(Text, nullable=True)
    action_taken = Column(String(500), nullable=True)

    reporter = relationship("User", foreign_keys=[reporter_id])
    target_user = relationship("User", foreign_keys=[target_user_id])
    target_facility = relationship("Facility")
    reviewed_by = relationship("User", foreign_keys=[reviewed_by_id])

    __table_args__ = (
        CheckConstraint(
            "(target_user_id IS NULL) <> (target_facility_id IS NULL)",
            name="check_report_single_target",
        ),
        CheckConstraint(f"status IN ({sql_in(ReportStatus)})", name="check_report_status"),
        CheckConstraint(f"report_type IN ({sql_in(ReportType)})", name="check_report_type"),
    )

    def __repr__(self) -> str:
        return f"<Report(id={self.id}, type={self.report_type}, status={self.status})>"
