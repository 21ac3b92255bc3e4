"""
Pydantic schemas for court bookings and slot waitlists.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class CourtBookingCreate(BaseModel):
    time_slot_id: int


class BookingCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class CourtBookingResponse(BaseModel):
    id: int
    time_slot_id: int
    court_id: int
    player_id: int
    total_price: float
    status: str
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingCancelResponse(BaseModel):
    success: bool = True
    message: str
    booking: CourtBookingResponse


class BookingTotals(BaseModel):
    total_bookings: int
    active_bookings: int
    completed_bookings: int
    cancelled_bookings: int
    total_spent: float


class PlayerBookingsResponse(BaseModel):
    bookings: list[CourtBookingResponse]
    totals: BookingTotals


class WaitlistEntryResponse(BaseModel):
    id: int
    time_slot_id: int
    player_id: int
    created_at: datetime

    model_config = {"from_attributes": True}
