"""
Public venue discovery: approved facilities, their slots and player reviews.
Everything here is readable without a token except submitting a review.
"""

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.enums import SportType, VenueType
from eventhive.models.user import User
from eventhive.schemas.time_slot import TimeSlotFilters, TimeSlotResponse
from eventhive.schemas.venue import (
    RatingSummary,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    VenueFilters,
    VenueListResponse,
    VenueResponse,
)
from eventhive.services import venue_service
from eventhive.core.security import get_current_user

router = APIRouter(prefix="/venues", tags=["Venues"])


def venue_filters(
    sport_type: Optional[SportType] = None,
    venue_type: Optional[VenueType] = None,
    location: Optional[str] = Query(None, max_length=120),
    search: Optional[str] = Query(None, max_length=100),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    sort_by: Literal["rating", "price_low", "price_high", "name"] = "rating",
) -> VenueFilters:
    return VenueFilters(
        sport_type=sport_type,
        venue_type=venue_type,
        location=location,
        search=search,
        min_rating=min_rating,
        sort_by=sort_by,
    )


@router.get("", response_model=VenueListResponse)
async def list_venues_endpoint(
    filters: VenueFilters = Depends(venue_filters),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    venues, total = await venue_service.list_venues(db, filters, page, page_size)
    return VenueListResponse(
        venues=venues,
        total=total,
        page=page,
        page_size=page_size,
        has_more=page * page_size < total,
    )


@router.get("/{facility_id}", response_model=VenueResponse)
async def get_venue_endpoint(facility_id: int, db: AsyncSession = Depends(get_db)):
    return await venue_service.get_venue(db, facility_id)


@router.get("/{facility_id}/time-slots", response_model=list[TimeSlotResponse])
async def list_venue_time_slots_endpoint(
    facility_id: int,
    day: Optional[date] = None,
    is_booked: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
):
    filters = TimeSlotFilters(day=day, is_booked=is_booked)
    return await venue_service.list_venue_time_slots(db, facility_id, filters)


@router.get("/{facility_id}/reviews", response_model=ReviewListResponse)
async def list_reviews_endpoint(
    facility_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    return await venue_service.list_venue_reviews(db, facility_id, page, page_size)


@router.post("/{facility_id}/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def submit_review_endpoint(
    facility_id: int,
    data: ReviewCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """One review per player; verified when the player has a completed booking here."""
    return await venue_service.submit_venue_review(db, facility_id, user, data)


@router.get("/{facility_id}/reviews/summary", response_model=RatingSummary)
async def rating_summary_endpoint(facility_id: int, db: AsyncSession = Depends(get_db)):
    return await venue_service.get_venue_rating_summary(db, facility_id)
