"""
Ticket model: the inventory ledger for one ticket class of an event.

`available_quantity` is denormalized so the confirmation path can decrement it
with a single conditional UPDATE. The CHECK constraints keep the ledger honest
even if application code gets it wrong.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from eventhive.db.base import Base, TimestampMixin
from eventhive.models.enums import TicketType, sql_in


class Ticket(Base, TimestampMixin):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    ticket_type = Column(String(20), nullable=False, default=TicketType.GENERAL.value)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    quantity = Column(Integer, nullable=False)
    sold_quantity = Column(Integer, nullable=False, default=0)
    available_quantity = Column(Integer, nullable=False)
    max_per_user = Column(Integer, nullable=False, default=1)
    min_per_user = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)
    sale_start_date = Column(DateTime(timezone=True), nullable=True)
    sale_end_date = Column(DateTime(timezone=True), nullable=True)

    event = relationship("Event", back_populates="tickets")

    __table_args__ = (
        CheckConstraint("available_quantity >= 0", name="check_ticket_available_non_negative"),
        CheckConstraint("sold_quantity >= 0", name="check_ticket_sold_non_negative"),
        CheckConstraint(
            "available_quantity + sold_quantity = quantity",
            name="check_ticket_ledger_balanced",
        ),
        CheckConstraint("price >= 0", name="check_ticket_price_non_negative"),
        CheckConstraint("min_per_user >= 1", name="check_ticket_min_per_user"),
        CheckConstraint("max_per_user >= min_per_user", name="check_ticket_per_user_range"),
        CheckConstraint(f"ticket_type IN ({sql_in(TicketType)})", name="check_ticket_type"),
    )

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, event={self.event_id}, available={self.available_quantity}/{self.quantity})>"
