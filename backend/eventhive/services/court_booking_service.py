"""
Player bookings of court time slots, cancellations and slot waitlists.

CONCURRENCY STRATEGY
====================

At most one CONFIRMED booking may exist per slot. The booking path reads the
slot FOR UPDATE and checks for an active booking, but the real guarantee is the
partial unique index uq_court_bookings_active_slot: if two requests still race
past the check, the second INSERT fails and is reported as a Conflict.
Cancelled bookings stay in the table as history and do not block re-booking.

Cancellation flips CONFIRMED -> CANCELLED with a conditional UPDATE, so two
concurrent cancels cannot both succeed.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.models.enums import BookingStatus, FacilityStatus, SlotStatus
from eventhive.models.facility import Court, Facility
from eventhive.models.time_slot import CourtBooking, TimeSlot, WaitlistEntry
from eventhive.models.user import User
from eventhive.services.permissions import get_time_slot_or_404
from eventhive.services.time_slot_service import derive_slot_status, has_active_booking
from eventhive.core.clock import ensure_utc, utcnow
from eventhive.core.config import get_settings
from eventhive.core.exceptions import ConflictError, ForbiddenError, NotFoundError, UnavailableError
from eventhive.core.logging import get_logger
from eventhive.core.metrics import record_court_booking

logger = get_logger(__name__)
settings = get_settings()

CENTS = Decimal("0.01")


def slot_price(slot: TimeSlot, court: Court) -> Decimal:
    """Slot override price, else the court's hourly rate pro-rated to the slot length."""
    if slot.price is not None:
        return Decimal(slot.price).quantize(CENTS)
    duration = ensure_utc(slot.end_time) - ensure_utc(slot.start_time)
    hours = Decimal(int(duration.total_seconds())) / Decimal(3600)
    return (Decimal(court.price_per_hour) * hours).quantize(CENTS)


async def book_time_slot(
    db: AsyncSession,
    player: User,
    slot_id: int,
    now: Optional[datetime] = None,
) -> CourtBooking:
    now = now or utcnow()

    result = await db.execute(select(TimeSlot).where(TimeSlot.id == slot_id).with_for_update())
    slot = result.scalar_one_or_none()
    if not slot:
        raise NotFoundError("Time slot not found")

    if slot.is_maintenance_blocked:
        record_court_booking("book", success=False)
        raise UnavailableError("Time slot is under maintenance")
    if ensure_utc(slot.start_time) <= now:
        record_court_booking("book", success=False)
        raise UnavailableError("Cannot book a time slot in the past")

    court = await db.get(Court, slot.court_id)
    facility = await db.get(Facility, court.facility_id)
    if not court.is_active:
        record_court_booking("book", success=False)
        raise UnavailableError("Court is not active")
    if facility.status != FacilityStatus.APPROVED.value:
        record_court_booking("book", success=False)
        raise UnavailableError("Facility is not approved for bookings")

    if await has_active_booking(db, slot.id):
        record_court_booking("book", success=False)
        raise ConflictError("Time slot is already booked")

    booking = CourtBooking(
        time_slot_id=slot.id,
        court_id=court.id,
        player_id=player.id,
        total_price=slot_price(slot, court),
        status=BookingStatus.CONFIRMED.value,
    )
    db.add(booking)
    try:
        await db.flush()
    except IntegrityError as exc:
        record_court_booking("book", success=False)
        logger.warning("court_booking_race_lost", slot_id=slot.id, player_id=player.id)
        raise ConflictError("Time slot is already booked") from exc

    # A player who books a slot no longer needs to wait for it
    waiting = await db.execute(
        select(WaitlistEntry).where(
            WaitlistEntry.time_slot_id == slot.id,
            WaitlistEntry.player_id == player.id,
        )
    )
    entry = waiting.scalar_one_or_none()
    if entry:
        await db.delete(entry)
        await db.flush()

    await db.refresh(booking)
    record_court_booking("book", success=True)
    logger.info(
        "court_booking_created",
        booking_id=booking.id,
        slot_id=slot.id,
        player_id=player.id,
        price=str(booking.total_price),
    )
    return booking


async def cancel_player_booking(
    db: AsyncSession,
    player: User,
    booking_id: int,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CourtBooking:
    """
    Cancel a CONFIRMED booking no later than CANCELLATION_CUTOFF_MINUTES before
    the slot starts. Slot and court counters are left untouched.
    """
    now = now or utcnow()

    booking = await db.get(CourtBooking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    if booking.player_id != player.id:
        raise ForbiddenError("Unauthorized access")

    if booking.status == BookingStatus.CANCELLED.value:
        raise ConflictError("Booking is already cancelled")
    if booking.status == BookingStatus.COMPLETED.value:
        raise ConflictError("Cannot cancel completed booking")

    slot = await db.get(TimeSlot, booking.time_slot_id)
    cutoff = timedelta(minutes=settings.CANCELLATION_CUTOFF_MINUTES)
    if ensure_utc(slot.start_time) - now < cutoff:
        record_court_booking("cancel", success=False)
        raise ConflictError(
            f"Cannot cancel booking less than {settings.CANCELLATION_CUTOFF_MINUTES} minutes before start time"
        )

    result = await db.execute(
        update(CourtBooking)
        .where(CourtBooking.id == booking.id, CourtBooking.status == BookingStatus.CONFIRMED.value)
        .values(
            status=BookingStatus.CANCELLED.value,
            cancelled_at=now,
            cancellation_reason=reason or "Cancelled by player",
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise ConflictError("Booking was modified concurrently")

    await db.refresh(booking)
    record_court_booking("cancel", success=True)
    logger.info("court_booking_cancelled", booking_id=booking.id, player_id=player.id)
    return booking


async def list_player_bookings(db: AsyncSession, player: User) -> tuple[list[CourtBooking], dict]:
    """Booking history, newest slot first, with spend and status totals."""
    result = await db.execute(
        select(CourtBooking)
        .join(TimeSlot, TimeSlot.id == CourtBooking.time_slot_id)
        .where(CourtBooking.player_id == player.id)
        .order_by(TimeSlot.start_time.desc(), CourtBooking.id.desc())
    )
    bookings = list(result.scalars().all())

    def count(status: BookingStatus) -> int:
        return sum(1 for b in bookings if b.status == status.value)

    spent = sum(
        (Decimal(b.total_price) for b in bookings if b.status != BookingStatus.CANCELLED.value),
        Decimal("0"),
    )
    totals = {
        "total_bookings": len(bookings),
        "active_bookings": count(BookingStatus.CONFIRMED),
        "completed_bookings": count(BookingStatus.COMPLETED),
        "cancelled_bookings": count(BookingStatus.CANCELLED),
        "total_spent": float(spent),
    }
    return bookings, totals


async def join_waitlist(db: AsyncSession, player: User, slot_id: int) -> WaitlistEntry:
    """Only slots that cannot be booked right now have a waitlist."""
    slot = await get_time_slot_or_404(db, slot_id)
    booked = await has_active_booking(db, slot.id)

    if derive_slot_status(slot, booked) == SlotStatus.AVAILABLE:
        raise ConflictError("Time slot is available; book it directly")

    own_booking = await db.execute(
        select(CourtBooking.id).where(
            CourtBooking.time_slot_id == slot.id,
            CourtBooking.player_id == player.id,
            CourtBooking.status == BookingStatus.CONFIRMED.value,
        )
    )
    if own_booking.scalar_one_or_none() is not None:
        raise ConflictError("You already hold this time slot")

    existing = await db.execute(
        select(WaitlistEntry.id).where(
            WaitlistEntry.time_slot_id == slot.id,
            WaitlistEntry.player_id == player.id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Already on the waitlist for this time slot")

    entry = WaitlistEntry(time_slot_id=slot.id, player_id=player.id)
    db.add(entry)
    try:
        await db.flush()
    except IntegrityError as exc:
        raise ConflictError("Already on the waitlist for this time slot") from exc

    await db.refresh(entry)
    logger.info("waitlist_joined", slot_id=slot.id, player_id=player.id)
    return entry


async def leave_waitlist(db: AsyncSession, player: User, slot_id: int) -> None:
    result = await db.execute(
        select(WaitlistEntry).where(
            WaitlistEntry.time_slot_id == slot_id,
            WaitlistEntry.player_id == player.id,
        )
    )
    entry = result.scalar_one_or_none()
    if not entry:
        raise NotFoundError("Not on the waitlist for this time slot")

    await db.delete(entry)
    await db.flush()
    logger.info("waitlist_left", slot_id=slot_id, player_id=player.id)
