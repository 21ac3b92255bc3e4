"""
Payment orders and their outcomes.

A PaymentOrder is a time-boxed purchase attempt. It starts PENDING and moves
exactly once to SUCCESSFUL, FAILED or CANCELLED. Every transition is written as
`UPDATE ... WHERE status = 'PENDING'`, so a terminal order can never move again.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from eventhive.db.base import Base, TimestampMixin
from eventhive.models.enums import PaymentOrderStatus, PaymentStatus, sql_in


class PaymentOrder(Base, TimestampMixin):
    __tablename__ = "payment_orders"

    id = Column(Integer, primary_key=True, index=True)
    order_ref = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    ticket_id = Column(Integer, ForeignKey("tickets.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    status = Column(String(20), nullable=False, default=PaymentOrderStatus.PENDING.value)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    payments = relationship("Payment", back_populates="payment_order", order_by="Payment.id")
    booking = relationship("Booking", back_populates="payment_order", uselist=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_payment_order_quantity_positive"),
        CheckConstraint("total_amount >= 0", name="check_payment_order_amount_non_negative"),
        CheckConstraint(f"status IN ({sql_in(PaymentOrderStatus)})", name="check_payment_order_status"),
        # The expiration sweeper scans PENDING orders by expiry
        Index("ix_payment_orders_status_expires", "status", "expires_at"),
    )

    def __repr__(self) -> str:
        return f"<PaymentOrder(ref={self.order_ref}, status={self.status}, qty={self.quantity})>"


class Payment(Base, TimestampMixin):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    payment_order_id = Column(Integer, ForeignKey("payment_orders.id"), nullable=False, index=True)
    external_payment_id = Column(String(128), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    status = Column(String(20), nullable=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    failure_reason = Column(String(500), nullable=True)

    payment_order = relationship("PaymentOrder", back_populates="payments")

    __table_args__ = (
        CheckConstraint(f"status IN ({sql_in(PaymentStatus)})", name="check_payment_status"),
    )
