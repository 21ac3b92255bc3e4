"""
Event model with attendee counters.

Key design decisions:
- `current_attendees` only grows, and only when a payment is confirmed
- Index on (status, start_date) serves the default "published, upcoming" listing
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from eventhive.db.base import Base, TimestampMixin
from eventhive.models.enums import EventCategory, EventStatus, sql_in


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(30), nullable=False, default=EventCategory.OTHER.value)
    status = Column(String(20), nullable=False, default=EventStatus.DRAFT.value)
    city = Column(String(120), nullable=True)
    location = Column(String(255), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    max_attendees = Column(Integer, nullable=False)
    current_attendees = Column(Integer, nullable=False, default=0)
    is_free = Column(Boolean, nullable=False, default=False)
    featured = Column(Boolean, nullable=False, default=False)
    trending = Column(Boolean, nullable=False, default=False)
    organizer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    published_at = Column(DateTime(timezone=True), nullable=True)

    organizer = relationship("User")
    tickets = relationship("Ticket", back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("current_attendees >= 0", name="check_event_attendees_non_negative"),
        CheckConstraint("max_attendees > 0", name="check_event_max_attendees_positive"),
        CheckConstraint("end_date >= start_date", name="check_event_dates_ordered"),
        CheckConstraint(f"status IN ({sql_in(EventStatus)})", name="check_event_status"),
        CheckConstraint(f"category IN ({sql_in(EventCategory)})", name="check_event_category"),
        Index("ix_events_status_start", "status", "start_date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, attendees={self.current_attendees}/{self.max_attendees})>"
