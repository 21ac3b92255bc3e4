"""
Public venue discovery and player reviews.

A venue is an APPROVED facility seen from the player's side: only its active
courts are shown, and a facility with no active court is not listed at all.
Reviews are one per player per venue; the facility row carries the rating
aggregate, recomputed after every new review.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, func, or_, exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.models.enums import BookingStatus, FacilityStatus, UserRole
from eventhive.models.facility import Court, Facility
from eventhive.models.review import FacilityReview
from eventhive.models.time_slot import CourtBooking, TimeSlot
from eventhive.models.user import User
from eventhive.schemas.facility import CourtResponse
from eventhive.schemas.time_slot import TimeSlotFilters
from eventhive.schemas.venue import ReviewCreate, VenueFilters
from eventhive.services.time_slot_service import build_slot_predicates, describe_slots
from eventhive.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from eventhive.core.logging import get_logger
from eventhive.core.metrics import reviews_submitted

logger = get_logger(__name__)

APPROVED = FacilityStatus.APPROVED.value


def _active_court_clause(sport_type=None):
    conditions = [Court.facility_id == Facility.id, Court.is_active.is_(True)]
    if sport_type:
        conditions.append(Court.sport_type == sport_type.value)
    return exists().where(*conditions)


def _min_price_column():
    return (
        select(func.min(Court.price_per_hour))
        .where(Court.facility_id == Facility.id, Court.is_active.is_(True))
        .correlate(Facility)
        .scalar_subquery()
    )


def build_venue_predicates(filters: VenueFilters) -> list:
    predicates = [Facility.status == APPROVED, _active_court_clause(filters.sport_type)]

    if filters.venue_type:
        predicates.append(Facility.venue_type == filters.venue_type.value)
    if filters.location:
        predicates.append(Facility.address.ilike(f"%{filters.location}%"))
    if filters.search:
        pattern = f"%{filters.search}%"
        predicates.append(
            or_(
                Facility.name.ilike(pattern),
                Facility.address.ilike(pattern),
                Facility.description.ilike(pattern),
            )
        )
    if filters.min_rating is not None:
        predicates.append(Facility.rating >= filters.min_rating)

    return predicates


def _venue_ordering(sort_by: str) -> list:
    if sort_by == "price_low":
        return [_min_price_column().asc(), Facility.name.asc()]
    if sort_by == "price_high":
        return [_min_price_column().desc(), Facility.name.asc()]
    if sort_by == "name":
        return [Facility.name.asc()]
    return [Facility.rating.desc(), Facility.review_count.desc(), Facility.name.asc()]


async def _active_courts(db: AsyncSession, facility_ids: list[int]) -> dict[int, list[Court]]:
    grouped = defaultdict(list)
    if not facility_ids:
        return grouped
    result = await db.execute(
        select(Court)
        .where(Court.facility_id.in_(facility_ids), Court.is_active.is_(True))
        .order_by(Court.id)
    )
    for court in result.scalars().all():
        grouped[court.facility_id].append(court)
    return grouped


def _describe_venue(facility: Facility, courts: list[Court]) -> dict:
    prices = [float(court.price_per_hour) for court in courts]
    return {
        "id": facility.id,
        "owner_id": facility.owner_id,
        "name": facility.name,
        "description": facility.description,
        "address": facility.address,
        "venue_type": facility.venue_type,
        "phone": facility.phone,
        "email": facility.email,
        "rating": float(facility.rating or 0),
        "review_count": facility.review_count or 0,
        "min_price": min(prices) if prices else None,
        "sport_types": sorted({court.sport_type for court in courts}),
        "courts": [CourtResponse.model_validate(court) for court in courts],
    }


async def list_venues(
    db: AsyncSession,
    filters: VenueFilters,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[dict], int]:
    query = select(Facility).where(*build_venue_predicates(filters))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    result = await db.execute(
        query
        .order_by(*_venue_ordering(filters.sort_by))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    facilities = list(result.scalars().all())
    courts = await _active_courts(db, [facility.id for facility in facilities])

    return [_describe_venue(facility, courts[facility.id]) for facility in facilities], total


async def get_approved_venue(db: AsyncSession, facility_id: int) -> Facility:
    facility = await db.get(Facility, facility_id)
    if not facility or facility.status != APPROVED:
        raise NotFoundError("Venue not found or not approved")
    return facility


async def get_venue(db: AsyncSession, facility_id: int) -> dict:
    facility = await get_approved_venue(db, facility_id)
    courts = await _active_courts(db, [facility.id])
    return _describe_venue(facility, courts[facility.id])


async def list_venue_time_slots(
    db: AsyncSession,
    facility_id: int,
    filters: Optional[TimeSlotFilters] = None,
) -> list[dict]:
    """Slots across all active courts of an approved venue, earliest first."""
    facility = await get_approved_venue(db, facility_id)
    court_ids = select(Court.id).where(Court.facility_id == facility.id, Court.is_active.is_(True))

    result = await db.execute(
        select(TimeSlot)
        .where(TimeSlot.court_id.in_(court_ids), *build_slot_predicates(filters or TimeSlotFilters()))
        .order_by(TimeSlot.start_time.asc(), TimeSlot.court_id.asc())
    )
    return await describe_slots(db, list(result.scalars().all()))


async def _has_completed_booking(db: AsyncSession, facility_id: int, player_id: int) -> bool:
    result = await db.execute(
        select(CourtBooking.id)
        .join(Court, Court.id == CourtBooking.court_id)
        .where(
            Court.facility_id == facility_id,
            CourtBooking.player_id == player_id,
            CourtBooking.status == BookingStatus.COMPLETED.value,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def _rating_stats(db: AsyncSession, facility_id: int) -> tuple[float, int]:
    average, count = (await db.execute(
        select(func.avg(FacilityReview.rating), func.count(FacilityReview.id))
        .where(FacilityReview.facility_id == facility_id)
    )).one()
    return round(float(average or 0), 2), count


def _describe_review(review: FacilityReview, player_name: str) -> dict:
    return {
        "id": review.id,
        "facility_id": review.facility_id,
        "player_id": review.player_id,
        "player_name": player_name,
        "rating": review.rating,
        "comment": review.comment,
        "verified": review.verified,
        "created_at": review.created_at,
    }


async def update_venue_rating(db: AsyncSession, facility_id: int) -> Facility:
    average, count = await _rating_stats(db, facility_id)
    facility = await db.get(Facility, facility_id)
    if not facility:
        raise NotFoundError("Facility not found")

    facility.rating = Decimal(str(average))
    facility.review_count = count
    await db.flush()
    await db.refresh(facility)
    return facility


async def submit_venue_review(
    db: AsyncSession,
    facility_id: int,
    player: User,
    data: ReviewCreate,
) -> dict:
    if player.role != UserRole.PLAYER.value:
        raise ForbiddenError("Only players can review venues")

    facility = await get_approved_venue(db, facility_id)

    existing = await db.execute(
        select(FacilityReview.id).where(
            FacilityReview.facility_id == facility.id,
            FacilityReview.player_id == player.id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("You have already reviewed this venue")

    verified = await _has_completed_booking(db, facility.id, player.id)
    review = FacilityReview(
        facility_id=facility.id,
        player_id=player.id,
        rating=data.rating,
        comment=data.comment,
        verified=verified,
    )
    db.add(review)
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.warning("venue_review_race_lost", facility_id=facility.id, player_id=player.id)
        raise ConflictError("You have already reviewed this venue") from exc

    await db.refresh(review)
    await update_venue_rating(db, facility.id)

    reviews_submitted.labels(verified=str(verified).lower()).inc()
    logger.info(
        "venue_review_submitted",
        facility_id=facility.id,
        player_id=player.id,
        rating=data.rating,
        verified=verified,
    )
    return _describe_review(review, player.name)


async def list_venue_reviews(
    db: AsyncSession,
    facility_id: int,
    page: int = 1,
    page_size: int = 10,
) -> dict:
    facility = await get_approved_venue(db, facility_id)
    average, total = await _rating_stats(db, facility.id)

    result = await db.execute(
        select(FacilityReview, User.name)
        .join(User, User.id == FacilityReview.player_id)
        .where(FacilityReview.facility_id == facility.id)
        .order_by(FacilityReview.created_at.desc(), FacilityReview.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    reviews = [_describe_review(review, name) for review, name in result.all()]

    return {
        "reviews": reviews,
        "total_reviews": total,
        "average_rating": average,
        "page": page,
        "page_size": page_size,
        "has_more": page * page_size < total,
    }


async def get_venue_rating_summary(db: AsyncSession, facility_id: int) -> dict:
    facility = await get_approved_venue(db, facility_id)
    average, total = await _rating_stats(db, facility.id)

    counts = dict((await db.execute(
        select(FacilityReview.rating, func.count(FacilityReview.id))
        .where(FacilityReview.facility_id == facility.id)
        .group_by(FacilityReview.rating)
    )).all())

    distribution = []
    for rating in range(5, 0, -1):
        count = counts.get(rating, 0)
        distribution.append({
            "rating": rating,
            "count": count,
            "percentage": round(count * 100 / total) if total else 0,
        })

    return {"average_rating": average, "total_reviews": total, "rating_distribution": distribution}
