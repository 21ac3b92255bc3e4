"""
Court time slots, the bookings made against them, and slot waitlists.

Key design decisions:
- A slot's status (AVAILABLE / BOOKED / MAINTENANCE) is derived, never stored
- Partial unique index: at most one CONFIRMED booking per slot, enforced by the store.
  Cancelled bookings stay as history and do not block re-booking.
"""

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey,
    Index, UniqueConstraint, CheckConstraint, text,
)
from sqlalchemy.orm import relationship

from eventhive.db.base import Base, TimestampMixin
from eventhive.models.enums import BookingStatus, sql_in


class TimeSlot(Base, TimestampMixin):
    __tablename__ = "time_slots"

    id = Column(Integer, primary_key=True, index=True)
    court_id = Column(Integer, ForeignKey("courts.id", ondelete="CASCADE"), nullable=False, index=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    # NULL falls back to the court's hourly rate
    price = Column(Numeric(10, 2), nullable=True)
    is_maintenance_blocked = Column(Boolean, nullable=False, default=False)
    maintenance_reason = Column(String(500), nullable=True)

    court = relationship("Court", back_populates="time_slots")
    bookings = relationship("CourtBooking", back_populates="time_slot", cascade="all, delete-orphan")
    waitlist_entries = relationship("WaitlistEntry", back_populates="time_slot", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("court_id", "start_time", name="uq_time_slot_court_start"),
        CheckConstraint("end_time > start_time", name="check_time_slot_ordered"),
        Index("ix_time_slots_court_range", "court_id", "start_time", "end_time"),
    )

    def __repr__(self) -> str:
        return f"<TimeSlot(id={self.id}, court={self.court_id}, start={self.start_time})>"


class CourtBooking(Base, TimestampMixin):
    __tablename__ = "court_bookings"

    id = Column(Integer, primary_key=True, index=True)
    time_slot_id = Column(Integer, ForeignKey("time_slots.id", ondelete="CASCADE"), nullable=False, index=True)
    court_id = Column(Integer, ForeignKey("courts.id", ondelete="CASCADE"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(String(500), nullable=True)

    time_slot = relationship("TimeSlot", back_populates="bookings")
    court = relationship("Court")
    player = relationship("User")

    __table_args__ = (
        CheckConstraint(f"status IN ({sql_in(BookingStatus)})", name="check_court_booking_status"),
        Index(
            "uq_court_bookings_active_slot",
            "time_slot_id",
            unique=True,
            postgresql_where=text("status = 'CONFIRMED'"),
            sqlite_where=text("status = 'CONFIRMED'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<CourtBooking(id={self.id}, slot={self.time_slot_id}, status={self.status})>"


class WaitlistEntry(Base, TimestampMixin):
    __tablename__ = "waitlist_entries"

    id = Column(Integer, primary_key=True, index=True)
    time_slot_id = Column(Integer, ForeignKey("time_slots.id", ondelete="CASCADE"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    time_slot = relationship("TimeSlot", back_populates="waitlist_entries")

    __table_args__ = (
        UniqueConstraint("time_slot_id", "player_id", name="uq_waitlist_slot_player"),
    )
