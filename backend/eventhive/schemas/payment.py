"""
Pydantic schemas for payment orders and ticket bookings.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class PaymentOrderCreate(BaseModel):
    event_id: int
    ticket_id: int
    quantity: int = Field(..., gt=0, le=100)
    # Optional echo of the amount shown to the buyer; must match the server price
    total_amount: Optional[Decimal] = Field(None, ge=0)


class PaymentVerify(BaseModel):
    external_payment_id: str = Field(..., min_length=1, max_length=128)


class PaymentFailure(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class PaymentOrderResponse(BaseModel):
    id: int
    order_ref: str
    user_id: int
    event_id: int
    ticket_id: int
    quantity: int
    total_amount: float
    currency: str
    status: str
    expires_at: datetime
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: int
    payment_order_id: int
    user_id: int
    event_id: int
    ticket_id: int
    quantity: int
    total_amount: float
    currency: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class PaymentVerifyResponse(BaseModel):
    success: bool = True
    booking: BookingResponse


class CleanupResponse(BaseModel):
    cancelled: int
