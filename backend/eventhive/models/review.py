"""
Player reviews of approved facilities.

One review per player per facility. A review is marked verified when the
player has a completed court booking at the facility.
"""

from sqlalchemy import Column, Integer, Text, Boolean, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from eventhive.db.base import Base, TimestampMixin


class FacilityReview(Base, TimestampMixin):
    __tablename__ = "facility_reviews"

    id = Column(Integer, primary_key=True, index=True)
    facility_id = Column(Integer, ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    verified = Column(Boolean, nullable=False, default=False)

    facility = relationship("Facility", back_populates="reviews")
    player = relationship("User")

    __table_args__ = (
        UniqueConstraint("facility_id", "player_id", name="uq_review_facility_player"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="check_review_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<FacilityReview(id={self.id}, facility={self.facility_id}, rating={self.rating})>"
