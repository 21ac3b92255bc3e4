"""
Court time slots: listing with derived status, CRUD, bulk generation and
maintenance blocking.

A slot's status is computed on read:
  MAINTENANCE  if is_maintenance_blocked (wins over everything)
  BOOKED       if it has a CONFIRMED court booking
  AVAILABLE    otherwise
"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import select, func, exists
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.models.enums import BookingStatus, SlotStatus
from eventhive.models.time_slot import CourtBooking, TimeSlot, WaitlistEntry
from eventhive.models.user import User
from eventhive.schemas.time_slot import TimeSlotCreate, TimeSlotFilters, TimeSlotGenerate, TimeSlotUpdate
from eventhive.services.permissions import get_court_or_404, get_managed_court, get_time_slot_or_404
from eventhive.core.clock import ensure_utc
from eventhive.core.exceptions import ConflictError, ValidationError
from eventhive.core.logging import get_logger
from eventhive.core.metrics import time_slots_generated

logger = get_logger(__name__)

CONFIRMED = BookingStatus.CONFIRMED.value
SUNDAY, SATURDAY = 0, 6


def derive_slot_status(slot: TimeSlot, has_active_booking: bool) -> SlotStatus:
    if slot.is_maintenance_blocked:
        return SlotStatus.MAINTENANCE
    if has_active_booking:
        return SlotStatus.BOOKED
    return SlotStatus.AVAILABLE


def _active_booking_clause():
    return exists().where(
        CourtBooking.time_slot_id == TimeSlot.id,
        CourtBooking.status == CONFIRMED,
    )


async def has_active_booking(db: AsyncSession, slot_id: int) -> bool:
    result = await db.execute(
        select(CourtBooking.id).where(
            CourtBooking.time_slot_id == slot_id,
            CourtBooking.status == CONFIRMED,
        ).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def describe_slots(db: AsyncSession, slots: list[TimeSlot]) -> list[dict]:
    """Attach derived status and waitlist size to each slot."""
    if not slots:
        return []
    ids = [slot.id for slot in slots]

    booked_ids = set((await db.execute(
        select(CourtBooking.time_slot_id).where(
            CourtBooking.time_slot_id.in_(ids),
            CourtBooking.status == CONFIRMED,
        )
    )).scalars().all())
    waitlist_counts = dict((await db.execute(
        select(WaitlistEntry.time_slot_id, func.count(WaitlistEntry.id))
        .where(WaitlistEntry.time_slot_id.in_(ids))
        .group_by(WaitlistEntry.time_slot_id)
    )).all())

    return [
        {
            "id": slot.id,
            "court_id": slot.court_id,
            "start_time": ensure_utc(slot.start_time),
            "end_time": ensure_utc(slot.end_time),
            "price": float(slot.price) if slot.price is not None else None,
            "is_maintenance_blocked": slot.is_maintenance_blocked,
            "maintenance_reason": slot.maintenance_reason,
            "status": derive_slot_status(slot, slot.id in booked_ids).value,
            "waitlist_count": waitlist_counts.get(slot.id, 0),
        }
        for slot in slots
    ]


async def describe_slot(db: AsyncSession, slot: TimeSlot) -> dict:
    return (await describe_slots(db, [slot]))[0]


async def list_court_time_slots(
    db: AsyncSession,
    court_id: int,
    filters: Optional[TimeSlotFilters] = None,
) -> list[dict]:
    await get_court_or_404(db, court_id)
    predicates = [TimeSlot.court_id == court_id, *build_slot_predicates(filters or TimeSlotFilters())]
    result = await db.execute(
        select(TimeSlot).where(*predicates).order_by(TimeSlot.start_time.asc())
    )
    return await describe_slots(db, list(result.scalars().all()))


def build_slot_predicates(filters: TimeSlotFilters) -> list:
    predicates = []
    if filters.day:
        day_start = datetime.combine(filters.day, time.min, tzinfo=timezone.utc)
        predicates.append(TimeSlot.start_time >= day_start)
        predicates.append(TimeSlot.start_time < day_start + timedelta(days=1))
    if filters.is_maintenance_blocked is not None:
        predicates.append(TimeSlot.is_maintenance_blocked.is_(filters.is_maintenance_blocked))
    if filters.is_booked is not None:
        clause = _active_booking_clause()
        predicates.append(clause if filters.is_booked else ~clause)
    return predicates


async def get_time_slot(db: AsyncSession, slot_id: int) -> dict:
    slot = await get_time_slot_or_404(db, slot_id)
    return await describe_slot(db, slot)


async def _find_overlap(
    db: AsyncSession,
    court_id: int,
    start: datetime,
    end: datetime,
    exclude_id: Optional[int] = None,
) -> Optional[TimeSlot]:
    query = select(TimeSlot).where(
        TimeSlot.court_id == court_id,
        TimeSlot.start_time < end,
        TimeSlot.end_time > start,
    )
    if exclude_id is not None:
        query = query.where(TimeSlot.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def create_time_slot(db: AsyncSession, court_id: int, data: TimeSlotCreate, user: User) -> TimeSlot:
    court, _ = await get_managed_court(db, court_id, user)
    start, end = ensure_utc(data.start_time), ensure_utc(data.end_time)

    if await _find_overlap(db, court.id, start, end):
        raise ConflictError("Time slot overlaps with existing time slot")

    slot = TimeSlot(
        court_id=court.id,
        start_time=start,
        end_time=end,
        price=data.price,
        is_maintenance_blocked=False,
    )
    db.add(slot)
    await db.flush()
    await db.refresh(slot)

    logger.info("time_slot_created", slot_id=slot.id, court_id=court.id)
    return slot


async def update_time_slot(db: AsyncSession, slot_id: int, data: TimeSlotUpdate, user: User) -> TimeSlot:
    slot = await get_time_slot_or_404(db, slot_id)
    await get_managed_court(db, slot.court_id, user)
    changes = data.model_dump(exclude_unset=True)

    start = ensure_utc(changes.get("start_time") or slot.start_time)
    end = ensure_utc(changes.get("end_time") or slot.end_time)
    moves = start != ensure_utc(slot.start_time) or end != ensure_utc(slot.end_time)

    if moves:
        if end <= start:
            raise ValidationError("End time must be after start time")
        if await has_active_booking(db, slot.id):
            raise ConflictError("Cannot change the time of a booked slot")
        if await _find_overlap(db, slot.court_id, start, end, exclude_id=slot.id):
            raise ConflictError("Time slot overlaps with existing time slot")
        slot.start_time = start
        slot.end_time = end

    if "price" in changes:
        slot.price = changes["price"]

    await db.flush()
    await db.refresh(slot)
    logger.info("time_slot_updated", slot_id=slot.id, moved=moves)
    return slot


async def delete_time_slot(db: AsyncSession, slot_id: int, user: User) -> None:
    slot = await get_time_slot_or_404(db, slot_id)
    await get_managed_court(db, slot.court_id, user)

    if await has_active_booking(db, slot.id):
        raise ConflictError("Cannot delete a time slot with a confirmed booking")

    await db.delete(slot)
    await db.flush()
    logger.info("time_slot_deleted", slot_id=slot_id)


def day_of_week(day: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def iter_candidate_slots(data: TimeSlotGenerate) -> Iterable[tuple[datetime, datetime, Optional[Decimal]]]:
    """Yield (start, end, price) for every slot the request describes, in UTC."""
    duration = timedelta(minutes=data.slot_duration)
    current = data.start_date
    while current <= data.end_date:
        weekday = day_of_week(current)
        if weekday in data.days_of_week:
            price = None
            if data.use_custom_pricing:
                price = data.weekend_price if weekday in (SUNDAY, SATURDAY) else data.weekday_price

            slot_start = datetime.combine(current, data.start_time, tzinfo=timezone.utc)
            day_end = datetime.combine(current, data.end_time, tzinfo=timezone.utc)
            while slot_start + duration <= day_end:
                yield slot_start, slot_start + duration, price
                slot_start += duration
        current += timedelta(days=1)


async def generate_time_slots_advanced(
    db: AsyncSession,
    court_id: int,
    data: TimeSlotGenerate,
    user: User,
) -> dict:
    """
    Create slots over a date range for the selected days of week.
    Candidates overlapping an existing slot are skipped, not treated as errors.
    """
    court, _ = await get_managed_court(db, court_id, user)
    candidates = list(iter_candidate_slots(data))
    if not candidates:
        return {"created": 0, "skipped": 0}

    window_start = min(start for start, _, _ in candidates)
    window_end = max(end for _, end, _ in candidates)
    existing = (await db.execute(
        select(TimeSlot.start_time, TimeSlot.end_time).where(
            TimeSlot.court_id == court.id,
            TimeSlot.start_time < window_end,
            TimeSlot.end_time > window_start,
        )
    )).all()
    taken = [(ensure_utc(start), ensure_utc(end)) for start, end in existing]

    created = 0
    for start, end, price in candidates:
        if any(start < taken_end and end > taken_start for taken_start, taken_end in taken):
            continue
        db.add(TimeSlot(
            court_id=court.id,
            start_time=start,
            end_time=end,
            price=price,
            is_maintenance_blocked=False,
        ))
        created += 1
    await db.flush()

    skipped = len(candidates) - created
    time_slots_generated.labels(result="created").inc(created)
    time_slots_generated.labels(result="skipped").inc(skipped)
    logger.info("time_slots_generated", court_id=court.id, created=created, skipped=skipped)
    return {"created": created, "skipped": skipped}


async def toggle_maintenance(
    db: AsyncSession,
    slot_id: int,
    user: User,
    reason: Optional[str] = None,
) -> TimeSlot:
    """Block or unblock a slot. Not allowed while the slot has an active booking."""
    slot = await get_time_slot_or_404(db, slot_id)
    await get_managed_court(db, slot.court_id, user)

    if await has_active_booking(db, slot.id):
        raise ConflictError("Cannot toggle maintenance on a booked time slot")

    slot.is_maintenance_blocked = not slot.is_maintenance_blocked
    slot.maintenance_reason = reason if slot.is_maintenance_blocked else None
    await db.flush()
    await db.refresh(slot)

    logger.info("time_slot_maintenance_toggled", slot_id=slot.id, blocked=slot.is_maintenance_blocked)
    return slot
