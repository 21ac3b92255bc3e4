"""
Ticket inventory ledger.

Each ticket row carries quantity, sold_quantity and available_quantity with
the invariant available_quantity + sold_quantity == quantity. Every write that
touches those columns is a single conditional UPDATE, so concurrent writers
cannot push the ledger out of balance; the CHECK constraints on the table are
the last line of defence.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.models.booking import Booking
from eventhive.models.enums import EventStatus
from eventhive.models.event import Event
from eventhive.models.payment import PaymentOrder
from eventhive.models.ticket import Ticket
from eventhive.models.user import User
from eventhive.schemas.ticket import TicketCreate, TicketUpdate
from eventhive.services.event_service import ensure_event_manager, get_event
from eventhive.core.clock import ensure_utc
from eventhive.core.exceptions import ConflictError, NotFoundError, UnavailableError, ValidationError
from eventhive.core.logging import get_logger

logger = get_logger(__name__)


async def get_ticket(db: AsyncSession, ticket_id: int) -> Ticket:
    ticket = await db.get(Ticket, ticket_id)
    if not ticket:
        raise NotFoundError("Ticket not found")
    return ticket


async def _get_managed_ticket(db: AsyncSession, ticket_id: int, user: User) -> Ticket:
    ticket = await get_ticket(db, ticket_id)
    event = await get_event(db, ticket.event_id)
    ensure_event_manager(event, user)
    return ticket


def _check_sale_window(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start and end and ensure_utc(end) <= ensure_utc(start):
        raise ValidationError("Sale end date must be after sale start date")


async def create_ticket(db: AsyncSession, event_id: int, data: TicketCreate, user: User) -> Ticket:
    event = await get_event(db, event_id)
    ensure_event_manager(event, user)

    ticket = Ticket(
        event_id=event.id,
        name=data.name,
        ticket_type=data.ticket_type.value,
        description=data.description,
        price=data.price,
        currency=data.currency.upper(),
        quantity=data.quantity,
        sold_quantity=0,
        available_quantity=data.quantity,
        max_per_user=data.max_per_user,
        min_per_user=data.min_per_user,
        is_active=True,
        sale_start_date=ensure_utc(data.sale_start_date),
        sale_end_date=ensure_utc(data.sale_end_date),
    )
    db.add(ticket)
    await db.flush()
    await db.refresh(ticket)

    logger.info("ticket_created", ticket_id=ticket.id, event_id=event.id, quantity=ticket.quantity)
    return ticket


async def update_ticket(db: AsyncSession, ticket_id: int, data: TicketUpdate, user: User) -> Ticket:
    """Update descriptive fields, price, per-user limits and the sale window."""
    ticket = await _get_managed_ticket(db, ticket_id, user)
    changes = data.model_dump(exclude_unset=True)

    min_per_user = changes.get("min_per_user", ticket.min_per_user)
    max_per_user = changes.get("max_per_user", ticket.max_per_user)
    if max_per_user < min_per_user:
        raise ValidationError("max_per_user must be >= min_per_user")
    _check_sale_window(
        changes.get("sale_start_date", ticket.sale_start_date),
        changes.get("sale_end_date", ticket.sale_end_date),
    )

    for field, value in changes.items():
        if isinstance(value, datetime):
            value = ensure_utc(value)
        setattr(ticket, field, value)

    await db.flush()
    await db.refresh(ticket)
    logger.info("ticket_updated", ticket_id=ticket.id, fields=sorted(changes))
    return ticket


async def toggle_ticket_status(db: AsyncSession, ticket_id: int, user: User) -> Ticket:
    ticket = await _get_managed_ticket(db, ticket_id, user)
    ticket.is_active = not ticket.is_active
    await db.flush()
    await db.refresh(ticket)

    logger.info("ticket_status_toggled", ticket_id=ticket.id, is_active=ticket.is_active)
    return ticket


async def update_ticket_quantity(db: AsyncSession, ticket_id: int, new_quantity: int, user: User) -> Ticket:
    """
    Resize the ledger. The new total may not drop below what is already sold;
    available_quantity is recomputed in the same statement.
    """
    ticket = await _get_managed_ticket(db, ticket_id, user)

    result = await db.execute(
        update(Ticket)
        .where(Ticket.id == ticket.id, Ticket.sold_quantity <= new_quantity)
        .values(
            quantity=new_quantity,
            available_quantity=new_quantity - Ticket.sold_quantity,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.refresh(ticket)
        raise ValidationError(
            f"Quantity cannot be lower than tickets already sold ({ticket.sold_quantity})"
        )

    await db.refresh(ticket)
    logger.info("ticket_quantity_updated", ticket_id=ticket.id, quantity=new_quantity)
    return ticket


async def delete_ticket(db: AsyncSession, ticket_id: int, user: User) -> None:
    ticket = await _get_managed_ticket(db, ticket_id, user)

    bookings = (await db.execute(
        select(func.count(Booking.id)).where(Booking.ticket_id == ticket.id)
    )).scalar()
    orders = (await db.execute(
        select(func.count(PaymentOrder.id)).where(PaymentOrder.ticket_id == ticket.id)
    )).scalar()
    if bookings or orders:
        raise ConflictError("Cannot delete a ticket that has bookings or payment orders")

    await db.delete(ticket)
    await db.flush()
    logger.info("ticket_deleted", ticket_id=ticket_id)


async def list_event_tickets(db: AsyncSession, event_id: int, active_only: bool = False) -> list[Ticket]:
    await get_event(db, event_id)
    query = select(Ticket).where(Ticket.event_id == event_id)
    if active_only:
        query = query.where(Ticket.is_active.is_(True))
    result = await db.execute(query.order_by(Ticket.price.asc(), Ticket.id.asc()))
    return list(result.scalars().all())


async def get_ticket_stats(db: AsyncSession, event_id: int, user: User) -> dict:
    event = await get_event(db, event_id)
    ensure_event_manager(event, user)

    tickets = await list_event_tickets(db, event_id)
    revenue = (await db.execute(
        select(func.coalesce(func.sum(Booking.total_amount), 0)).where(Booking.event_id == event_id)
    )).scalar()

    return {
        "total_tickets": sum(t.quantity for t in tickets),
        "sold_tickets": sum(t.sold_quantity for t in tickets),
        "available_tickets": sum(t.available_quantity for t in tickets),
        "total_revenue": float(Decimal(revenue)),
        "tickets": tickets,
    }


def ensure_purchasable(ticket: Ticket, event: Event, quantity: int, now: datetime) -> None:
    """Raise if `quantity` units of `ticket` cannot be sold at `now`."""
    if not ticket.is_active:
        raise UnavailableError("Ticket is not available")
    if event.status != EventStatus.PUBLISHED.value:
        raise UnavailableError("Event is not published")
    if ensure_utc(event.start_date) <= now:
        raise UnavailableError("Event has already started")
    if ticket.sale_start_date and ensure_utc(ticket.sale_start_date) > now:
        raise UnavailableError("Ticket sales have not started yet")
    if ticket.sale_end_date and ensure_utc(ticket.sale_end_date) < now:
        raise UnavailableError("Ticket sales have ended")
    if quantity < ticket.min_per_user:
        raise ValidationError(f"Minimum {ticket.min_per_user} tickets per order")
    if quantity > ticket.max_per_user:
        raise ValidationError(f"Maximum {ticket.max_per_user} tickets per user allowed")
    if ticket.available_quantity < quantity:
        raise UnavailableError("Not enough tickets available")
    if event.current_attendees + quantity > event.max_attendees:
        raise UnavailableError("Event is at full capacity")
