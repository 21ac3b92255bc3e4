"""
Event ticket booking, created only when a payment order is confirmed.

Key design decisions:
- Unique payment_order_id: one order can never produce two bookings
- Status stays CONFIRMED; ticket bookings are not cancellable, so sold counts only grow
"""

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from eventhive.db.base import Base, TimestampMixin
from eventhive.models.enums import BookingStatus, sql_in


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    payment_order_id = Column(Integer, ForeignKey("payment_orders.id"), nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)

    payment_order = relationship("PaymentOrder", back_populates="booking")
    event = relationship("Event")
    ticket = relationship("Ticket")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_booking_quantity_positive"),
        CheckConstraint(f"status IN ({sql_in(BookingStatus)})", name="check_booking_status"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user={self.user_id}, event={self.event_id}, status={self.status})>"
