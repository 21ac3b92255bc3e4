"""
Facility management: owner CRUD plus admin approval.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.models.enums import BookingStatus, FacilityStatus, UserRole
from eventhive.models.facility import Court, Facility
from eventhive.models.time_slot import CourtBooking, TimeSlot
from eventhive.models.user import User
from eventhive.schemas.facility import FacilityCreate, FacilityUpdate
from eventhive.services.permissions import get_facility_or_404, get_managed_facility
from eventhive.core.clock import utcnow
from eventhive.core.exceptions import ConflictError, ForbiddenError
from eventhive.core.logging import get_logger

logger = get_logger(__name__)

FACILITY_CREATOR_ROLES = frozenset({UserRole.FACILITY_OWNER.value, UserRole.ADMIN.value})


async def create_facility(db: AsyncSession, data: FacilityCreate, user: User) -> Facility:
    """New facilities start PENDING until an admin approves them."""
    if user.role not in FACILITY_CREATOR_ROLES:
        raise ForbiddenError("Only facility owners can create facilities")

    facility = Facility(
        owner_id=user.id,
        name=data.name,
        description=data.description,
        address=data.address,
        venue_type=data.venue_type.value,
        phone=data.phone,
        email=data.email,
        status=FacilityStatus.PENDING.value,
    )
    db.add(facility)
    await db.flush()
    await db.refresh(facility)

    logger.info("facility_created", facility_id=facility.id, owner_id=user.id)
    return facility


async def update_facility(db: AsyncSession, facility_id: int, data: FacilityUpdate, user: User) -> Facility:
    facility = await get_managed_facility(db, facility_id, user)
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if field == "venue_type" and value is not None:
            value = value.value
        setattr(facility, field, value)

    await db.flush()
    await db.refresh(facility)
    logger.info("facility_updated", facility_id=facility.id, fields=sorted(changes))
    return facility


async def count_upcoming_bookings(db: AsyncSession, facility_id: int, now: datetime) -> int:
    result = await db.execute(
        select(func.count(CourtBooking.id))
        .join(TimeSlot, TimeSlot.id == CourtBooking.time_slot_id)
        .join(Court, Court.id == CourtBooking.court_id)
        .where(
            Court.facility_id == facility_id,
            CourtBooking.status == BookingStatus.CONFIRMED.value,
            TimeSlot.start_time > now,
        )
    )
    return result.scalar()


async def delete_facility(
    db: AsyncSession,
    facility_id: int,
    user: User,
    now: Optional[datetime] = None,
) -> None:
    """Refused while any court of the facility has a confirmed future booking."""
    facility = await get_managed_facility(db, facility_id, user)

    upcoming = await count_upcoming_bookings(db, facility.id, now or utcnow())
    if upcoming:
        raise ConflictError(f"Cannot delete facility with {upcoming} upcoming booking(s)")

    await db.delete(facility)
    await db.flush()
    logger.info("facility_deleted", facility_id=facility_id, deleted_by=user.id)


async def list_user_facilities(db: AsyncSession, user: User) -> list[Facility]:
    """Owners see their own facilities, admins see every facility."""
    query = select(Facility)
    if not user.is_admin:
        query = query.where(Facility.owner_id == user.id)
    result = await db.execute(query.order_by(Facility.created_at.desc(), Facility.id.desc()))
    return list(result.scalars().all())


async def get_facility(db: AsyncSession, facility_id: int) -> Facility:
    return await get_facility_or_404(db, facility_id)


async def approve_facility(db: AsyncSession, facility_id: int, admin: User) -> Facility:
    facility = await get_facility_or_404(db, facility_id)
    facility.status = FacilityStatus.APPROVED.value
    facility.rejection_reason = None
    await db.flush()
    await db.refresh(facility)

    logger.info("facility_approved", facility_id=facility.id, admin_id=admin.id)
    return facility


async def reject_facility(db: AsyncSession, facility_id: int, admin: User, reason: str) -> Facility:
    facility = await get_facility_or_404(db, facility_id)
    facility.status = FacilityStatus.REJECTED.value
    facility.rejection_reason = reason
    await db.flush()
    await db.refresh(facility)

    logger.info("facility_rejected", facility_id=facility.id, admin_id=admin.id, reason=reason)
    return facility
