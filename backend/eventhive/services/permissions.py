"""
Ownership checks shared by the facility, court and time-slot services.

A facility is managed by its owner or by any admin. Courts and slots inherit
the rule from their facility.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.core.exceptions import ForbiddenError, NotFoundError
from eventhive.models.facility import Court, Facility
from eventhive.models.time_slot import TimeSlot
from eventhive.models.user import User


def can_manage(user: User, owner_id: int) -> bool:
    return user.is_admin or user.id == owner_id


def ensure_can_manage(user: User, owner_id: int, message: str = "Insufficient permissions") -> None:
    if not can_manage(user, owner_id):
        raise ForbiddenError(message)


async def get_facility_or_404(db: AsyncSession, facility_id: int) -> Facility:
    facility = await db.get(Facility, facility_id)
    if facility is None:
        raise NotFoundError("Facility not found")
    return facility


async def get_court_or_404(db: AsyncSession, court_id: int) -> Court:
    court = await db.get(Court, court_id)
    if court is None:
        raise NotFoundError("Court not found")
    return court


async def get_time_slot_or_404(db: AsyncSession, slot_id: int) -> TimeSlot:
    slot = await db.get(TimeSlot, slot_id)
    if slot is None:
        raise NotFoundError("Time slot not found")
    return slot


async def get_managed_facility(db: AsyncSession, facility_id: int, user: User) -> Facility:
    facility = await get_facility_or_404(db, facility_id)
    ensure_can_manage(user, facility.owner_id, "Unauthorized to manage this facility")
    return facility


async def get_managed_court(db: AsyncSession, court_id: int, user: User) -> tuple[Court, Facility]:
    court = await get_court_or_404(db, court_id)
    facility = await get_facility_or_404(db, court.facility_id)
    ensure_can_manage(user, facility.owner_id, "Unauthorized to manage this court")
    return court, facility
