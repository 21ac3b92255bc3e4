"""
Booking endpoints: court slot bookings, player cancellation and ticket booking history.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.user import User
from eventhive.schemas.booking import (
    BookingCancelRequest,
    BookingCancelResponse,
    CourtBookingCreate,
    CourtBookingResponse,
)
from eventhive.schemas.payment import BookingResponse
from eventhive.services import court_booking_service
from eventhive.services.payment_service import list_user_event_bookings
from eventhive.core.security import get_current_user, get_current_user_id

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=CourtBookingResponse, status_code=status.HTTP_201_CREATED)
async def book_time_slot_endpoint(
    data: CourtBookingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Book a court time slot.

    At most one confirmed booking can exist per slot; a losing concurrent
    request gets a 409.
    """
    return await court_booking_service.book_time_slot(db, user, data.time_slot_id)


@router.patch("/{booking_id}/cancel", response_model=BookingCancelResponse)
async def cancel_booking_endpoint(
    booking_id: int,
    data: Optional[BookingCancelRequest] = Body(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a court booking; refused within 30 minutes of the start time."""
    reason = data.reason if data else None
    booking = await court_booking_service.cancel_player_booking(db, user, booking_id, reason)
    return BookingCancelResponse(
        message="Booking cancelled successfully",
        booking=CourtBookingResponse.model_validate(booking),
    )


@router.get("/events", response_model=list[BookingResponse])
async def list_event_bookings_endpoint(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Ticket bookings of the authenticated user."""
    return await list_user_event_bookings(db, user_id)
