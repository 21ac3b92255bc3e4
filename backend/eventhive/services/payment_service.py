"""
Payment order workflow: reserve, confirm, fail, cancel.

CONCURRENCY STRATEGY: Soft reservation, atomic confirmation
===========================================================

Creating a payment order does NOT hold inventory. The order only records the
intent to buy, with a 15 minute deadline (expires_at). Inventory moves at
exactly one point: verify_payment.

verify_payment runs inside the request transaction and:

  1. Reads the order row FOR UPDATE, so two verifications of the same order
     serialize on PostgreSQL
  2. Re-checks ownership, PENDING status and the deadline
  3. UPDATE tickets SET sold_quantity = sold_quantity + :qty,
                        available_quantity = available_quantity - :qty
     WHERE id = :ticket_id AND is_active AND available_quantity >= :qty
     Zero rows affected means someone else took the last units -> Unavailable
  4. UPDATE payment_orders SET status = 'SUCCESSFUL'
     WHERE id = :order_id AND status = 'PENDING'
     Zero rows affected means the order was resolved concurrently -> Conflict
  5. Inserts the Payment and Booking rows and bumps event attendance

Two PENDING orders racing for the last unit therefore cannot both confirm: the
conditional decrement lets exactly one through. Any error raised after a write
propagates out of the service and the request session rolls the whole
transaction back.

Every other transition (fail, cancel, expire) is also a conditional UPDATE on
status = 'PENDING', so a terminal order never changes again.
"""

import time
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.models.booking import Booking
from eventhive.models.enums import BookingStatus, PaymentOrderStatus, PaymentStatus
from eventhive.models.event import Event
from eventhive.models.payment import Payment, PaymentOrder
from eventhive.models.ticket import Ticket
from eventhive.models.user import User
from eventhive.schemas.payment import PaymentOrderCreate
from eventhive.services.ticket_service import ensure_purchasable
from eventhive.core.clock import ensure_utc, utcnow
from eventhive.core.config import get_settings
from eventhive.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnavailableError,
    ValidationError,
)
from eventhive.core.logging import get_logger
from eventhive.core.metrics import payment_verification_latency, record_payment_order

logger = get_logger(__name__)
settings = get_settings()

CENTS = Decimal("0.01")
PENDING = PaymentOrderStatus.PENDING.value


def new_order_ref() -> str:
    return f"order_{uuid.uuid4().hex[:24]}"


async def _get_order_for_update(db: AsyncSession, order_ref: str) -> PaymentOrder:
    result = await db.execute(
        select(PaymentOrder).where(PaymentOrder.order_ref == order_ref).with_for_update()
    )
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Payment order not found")
    return order


async def _units_held(db: AsyncSession, user_id: int, ticket_id: int, now: datetime) -> int:
    """Units the user already owns or has open orders for on this ticket."""
    booked = (await db.execute(
        select(func.coalesce(func.sum(Booking.quantity), 0)).where(
            Booking.user_id == user_id,
            Booking.ticket_id == ticket_id,
            Booking.status == BookingStatus.CONFIRMED.value,
        )
    )).scalar()
    pending = (await db.execute(
        select(func.coalesce(func.sum(PaymentOrder.quantity), 0)).where(
            PaymentOrder.user_id == user_id,
            PaymentOrder.ticket_id == ticket_id,
            PaymentOrder.status == PENDING,
            PaymentOrder.expires_at > now,
        )
    )).scalar()
    return int(booked) + int(pending)


async def create_payment_order(
    db: AsyncSession,
    user: User,
    order_data: PaymentOrderCreate,
    now: Optional[datetime] = None,
) -> PaymentOrder:
    """
    Open a PENDING payment order for `quantity` units of a ticket.
    The amount is always computed here; a client-supplied amount must agree with it.
    """
    now = now or utcnow()

    ticket = await db.get(Ticket, order_data.ticket_id)
    if not ticket or ticket.event_id != order_data.event_id:
        raise NotFoundError("Ticket not found")
    event = await db.get(Event, ticket.event_id)
    if not event:
        raise NotFoundError("Event not found")

    try:
        ensure_purchasable(ticket, event, order_data.quantity, now)
    except (UnavailableError, ValidationError):
        record_payment_order("rejected")
        raise

    total_amount = (Decimal(ticket.price) * order_data.quantity).quantize(CENTS)
    if order_data.total_amount is not None and Decimal(order_data.total_amount).quantize(CENTS) != total_amount:
        record_payment_order("rejected")
        raise ValidationError("Order amount does not match the ticket price")

    held = await _units_held(db, user.id, ticket.id, now)
    if held + order_data.quantity > ticket.max_per_user:
        record_payment_order("rejected")
        raise ValidationError(f"Maximum {ticket.max_per_user} tickets per user allowed")

    order = PaymentOrder(
        order_ref=new_order_ref(),
        user_id=user.id,
        event_id=event.id,
        ticket_id=ticket.id,
        quantity=order_data.quantity,
        total_amount=total_amount,
        currency=ticket.currency,
        status=PENDING,
        expires_at=now + timedelta(minutes=settings.PAYMENT_ORDER_TTL_MINUTES),
    )
    db.add(order)
    await db.flush()
    await db.refresh(order)

    record_payment_order("created")
    logger.info(
        "payment_order_created",
        order_ref=order.order_ref,
        user_id=user.id,
        ticket_id=ticket.id,
        quantity=order.quantity,
        amount=str(total_amount),
    )
    return order


async def get_payment_order(db: AsyncSession, user: User, order_ref: str) -> PaymentOrder:
    result = await db.execute(select(PaymentOrder).where(PaymentOrder.order_ref == order_ref))
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Payment order not found")
    if order.user_id != user.id and not user.is_admin:
        raise ForbiddenError("Unauthorized access to payment order")
    return order


async def verify_payment(
    db: AsyncSession,
    user: User,
    order_ref: str,
    external_payment_id: str,
    now: Optional[datetime] = None,
) -> Booking:
    """
    Confirm a paid order: move inventory, resolve the order, create the booking.
    All preconditions are checked before the first write.
    """
    now = now or utcnow()

    with payment_verification_latency.time():
        order = await _get_order_for_update(db, order_ref)

        if order.user_id != user.id:
            raise ForbiddenError("Unauthorized access to payment order")
        if order.status != PENDING:
            raise ConflictError(f"Payment order is already {order.status}")
        if ensure_utc(order.expires_at) <= now:
            logger.warning("payment_verification_expired", order_ref=order_ref)
            raise ConflictError("Payment order has expired")

        # Inventory: the only place sold/available move
        ticket_result = await db.execute(
            update(Ticket)
            .where(
                Ticket.id == order.ticket_id,
                Ticket.is_active.is_(True),
                Ticket.available_quantity >= order.quantity,
            )
            .values(
                sold_quantity=Ticket.sold_quantity + order.quantity,
                available_quantity=Ticket.available_quantity - order.quantity,
            )
            .execution_options(synchronize_session=False)
        )
        if ticket_result.rowcount == 0:
            logger.warning("payment_verification_unavailable", order_ref=order_ref, ticket_id=order.ticket_id)
            record_payment_order("rejected")
            raise UnavailableError("Ticket is no longer available in the requested quantity")

        order_result = await db.execute(
            update(PaymentOrder)
            .where(PaymentOrder.id == order.id, PaymentOrder.status == PENDING)
            .values(status=PaymentOrderStatus.SUCCESSFUL.value)
            .execution_options(synchronize_session=False)
        )
        if order_result.rowcount == 0:
            raise ConflictError("Payment order was resolved concurrently")

        event_result = await db.execute(
            update(Event)
            .where(
                Event.id == order.event_id,
                Event.current_attendees + order.quantity <= Event.max_attendees,
            )
            .values(current_attendees=Event.current_attendees + order.quantity)
            .execution_options(synchronize_session=False)
        )
        if event_result.rowcount == 0:
            raise UnavailableError("Event is at full capacity")

        payment = Payment(
            payment_order_id=order.id,
            external_payment_id=external_payment_id,
            amount=order.total_amount,
            currency=order.currency,
            status=PaymentStatus.SUCCESSFUL.value,
            is_verified=True,
            verified_at=now,
        )
        booking = Booking(
            payment_order_id=order.id,
            user_id=order.user_id,
            event_id=order.event_id,
            ticket_id=order.ticket_id,
            quantity=order.quantity,
            total_amount=order.total_amount,
            currency=order.currency,
            status=BookingStatus.CONFIRMED.value,
        )
        db.add_all([payment, booking])
        await db.flush()

        # The bulk UPDATEs above bypassed the identity map
        await db.refresh(order)
        for stale in (await db.get(Ticket, order.ticket_id), await db.get(Event, order.event_id)):
            if stale is not None:
                await db.refresh(stale)
        await db.refresh(booking)

    record_payment_order("successful")
    logger.info(
        "payment_verified",
        order_ref=order.order_ref,
        booking_id=booking.id,
        user_id=order.user_id,
        ticket_id=order.ticket_id,
        quantity=order.quantity,
    )
    return booking


async def handle_payment_failure(
    db: AsyncSession,
    order_ref: str,
    reason: Optional[str] = None,
    user: Optional[User] = None,
) -> PaymentOrder:
    """
    Mark a PENDING order FAILED and record the failed payment.
    Repeating the call on a FAILED order is a no-op; other terminal states are refused.
    """
    order = await _get_order_for_update(db, order_ref)
    if user is not None and order.user_id != user.id and not user.is_admin:
        raise ForbiddenError("Unauthorized access to payment order")

    if order.status == PaymentOrderStatus.FAILED.value:
        logger.info("payment_failure_repeated", order_ref=order_ref)
        return order
    if order.status != PENDING:
        raise ConflictError(f"Payment order is already {order.status}")

    result = await db.execute(
        update(PaymentOrder)
        .where(PaymentOrder.id == order.id, PaymentOrder.status == PENDING)
        .values(status=PaymentOrderStatus.FAILED.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise ConflictError("Payment order was resolved concurrently")

    db.add(Payment(
        payment_order_id=order.id,
        amount=order.total_amount,
        currency=order.currency,
        status=PaymentStatus.FAILED.value,
        is_verified=False,
        failure_reason=reason,
    ))
    await db.flush()
    await db.refresh(order)

    record_payment_order("failed")
    logger.info("payment_failed", order_ref=order_ref, reason=reason)
    return order


async def cancel_payment_order(db: AsyncSession, user: User, order_ref: str) -> PaymentOrder:
    """Owner-initiated cancellation of a PENDING order."""
    order = await _get_order_for_update(db, order_ref)
    if order.user_id != user.id:
        raise ForbiddenError("Unauthorized access to payment order")
    if order.status != PENDING:
        raise ConflictError(f"Cannot cancel a payment order that is {order.status}")

    result = await db.execute(
        update(PaymentOrder)
        .where(PaymentOrder.id == order.id, PaymentOrder.status == PENDING)
        .values(status=PaymentOrderStatus.CANCELLED.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise ConflictError("Payment order was resolved concurrently")

    await db.refresh(order)
    record_payment_order("cancelled")
    logger.info("payment_order_cancelled", order_ref=order_ref, user_id=user.id)
    return order


async def list_user_event_bookings(db: AsyncSession, user_id: int) -> list[Booking]:
    """Ticket bookings of a user, newest first."""
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())
