"""
Self-service profile endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.user import User
from eventhive.schemas.booking import BookingTotals, CourtBookingResponse, PlayerBookingsResponse
from eventhive.schemas.user import ProfileUpdate, UserResponse
from eventhive.services.court_booking_service import list_player_bookings
from eventhive.services.user_service import update_profile
from eventhive.core.security import get_current_user

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=UserResponse)
async def get_profile_endpoint(user: User = Depends(get_current_user)):
    return user


@router.patch("", response_model=UserResponse)
async def update_profile_endpoint(
    data: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await update_profile(db, user, data)


@router.get("/bookings", response_model=PlayerBookingsResponse)
async def profile_bookings_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Court booking history of the caller, with totals."""
    bookings, totals = await list_player_bookings(db, user)
    return PlayerBookingsResponse(
        bookings=[CourtBookingResponse.model_validate(b) for b in bookings],
        totals=BookingTotals(**totals),
    )
