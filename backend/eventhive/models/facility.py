"""
Sports facilities and their courts.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from eventhive.db.base import Base, TimestampMixin
from eventhive.models.enums import FacilityStatus, SportType, VenueType, sql_in


class Facility(Base, TimestampMixin):
    __tablename__ = "facilities"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(500), nullable=False)
    venue_type = Column(String(20), nullable=False, default=VenueType.INDOOR.value)
    phone = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=FacilityStatus.PENDING.value)
    rejection_reason = Column(String(500), nullable=True)
    # Aggregate of facility_reviews, rewritten on every new review
    rating = Column(Numeric(3, 2), nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)

    owner = relationship("User", back_populates="facilities")
    courts = relationship("Court", back_populates="facility", cascade="all, delete-orphan")
    reviews = relationship("FacilityReview", back_populates="facility", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(f"status IN ({sql_in(FacilityStatus)})", name="check_facility_status"),
        CheckConstraint(f"venue_type IN ({sql_in(VenueType)})", name="check_facility_venue_type"),
    )

    def __repr__(self) -> str:
        return f"<Facility(id={self.id}, name={self.name}, status={self.status})>"


class Court(Base, TimestampMixin):
    __tablename__ = "courts"

    id = Column(Integer, primary_key=True, index=True)
    facility_id = Column(Integer, ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    sport_type = Column(String(20), nullable=False)
    price_per_hour = Column(Numeric(10, 2), nullable=False)
    operating_start_hour = Column(Integer, nullable=False, default=6)
    operating_end_hour = Column(Integer, nullable=False, default=22)
    is_active = Column(Boolean, nullable=False, default=True)

    facility = relationship("Facility", back_populates="courts")
    time_slots = relationship("TimeSlot", back_populates="court", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("price_per_hour >= 0", name="check_court_price_non_negative"),
        CheckConstraint(
            "operating_start_hour >= 0 AND operating_end_hour <= 23 "
            "AND operating_start_hour < operating_end_hour",
            name="check_court_operating_hours",
        ),
        CheckConstraint(f"sport_type IN ({sql_in(SportType)})", name="check_court_sport_type"),
    )

    def __repr__(self) -> str:
        return f"<Court(id={self.id}, facility={self.facility_id}, name={self.name})>"
