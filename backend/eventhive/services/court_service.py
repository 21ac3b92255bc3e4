"""
Court management within a facility.
"""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.models.enums import BookingStatus
from eventhive.models.facility import Court
from eventhive.models.time_slot import CourtBooking
from eventhive.models.user import User
from eventhive.schemas.facility import CourtCreate, CourtUpdate
from eventhive.services.permissions import get_court_or_404, get_facility_or_404, get_managed_court, get_managed_facility
from eventhive.core.exceptions import ConflictError, ValidationError
from eventhive.core.logging import get_logger

logger = get_logger(__name__)


def validate_operating_hours(start_hour: int, end_hour: int) -> None:
    if not (0 <= start_hour <= 23 and 0 <= end_hour <= 23):
        raise ValidationError("Operating hours must be between 0 and 23")
    if start_hour >= end_hour:
        raise ValidationError("Operating start hour must be before end hour")


async def create_court(db: AsyncSession, facility_id: int, data: CourtCreate, user: User) -> Court:
    facility = await get_managed_facility(db, facility_id, user)
    validate_operating_hours(data.operating_start_hour, data.operating_end_hour)

    court = Court(
        facility_id=facility.id,
        name=data.name,
        sport_type=data.sport_type.value,
        price_per_hour=data.price_per_hour,
        operating_start_hour=data.operating_start_hour,
        operating_end_hour=data.operating_end_hour,
        is_active=True,
    )
    db.add(court)
    await db.flush()
    await db.refresh(court)

    logger.info("court_created", court_id=court.id, facility_id=facility.id)
    return court


async def update_court(db: AsyncSession, court_id: int, data: CourtUpdate, user: User) -> Court:
    court, _ = await get_managed_court(db, court_id, user)
    changes = data.model_dump(exclude_unset=True)

    validate_operating_hours(
        changes.get("operating_start_hour", court.operating_start_hour),
        changes.get("operating_end_hour", court.operating_end_hour),
    )
    for field, value in changes.items():
        if field == "sport_type" and value is not None:
            value = value.value
        setattr(court, field, value)

    await db.flush()
    await db.refresh(court)
    logger.info("court_updated", court_id=court.id, fields=sorted(changes))
    return court


async def delete_court(db: AsyncSession, court_id: int, user: User) -> None:
    """Refused while the court has any CONFIRMED booking, past or future."""
    court, _ = await get_managed_court(db, court_id, user)

    confirmed = (await db.execute(
        select(func.count(CourtBooking.id)).where(
            CourtBooking.court_id == court.id,
            CourtBooking.status == BookingStatus.CONFIRMED.value,
        )
    )).scalar()
    if confirmed:
        raise ConflictError("Cannot delete court with confirmed bookings")

    await db.delete(court)
    await db.flush()
    logger.info("court_deleted", court_id=court_id, deleted_by=user.id)


async def toggle_court_status(db: AsyncSession, court_id: int, user: User) -> Court:
    court, _ = await get_managed_court(db, court_id, user)
    court.is_active = not court.is_active
    await db.flush()
    await db.refresh(court)

    logger.info("court_status_toggled", court_id=court.id, is_active=court.is_active)
    return court


async def list_facility_courts(db: AsyncSession, facility_id: int) -> list[Court]:
    await get_facility_or_404(db, facility_id)
    result = await db.execute(
        select(Court).where(Court.facility_id == facility_id).order_by(Court.name, Court.id)
    )
    return list(result.scalars().all())


async def get_court(db: AsyncSession, court_id: int) -> Court:
    return await get_court_or_404(db, court_id)
