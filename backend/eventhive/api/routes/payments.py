"""
Payment order endpoints: reserve, verify, fail, cancel.

Payment capture itself is simulated; `verify` is called with whatever payment
id the client-side checkout produced.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.user import User
from eventhive.schemas.payment import (
    BookingResponse,
    PaymentFailure,
    PaymentOrderCreate,
    PaymentOrderResponse,
    PaymentVerify,
    PaymentVerifyResponse,
)
from eventhive.services import payment_service
from eventhive.services.cache_service import invalidate_event_cache
from eventhive.core.security import get_current_user

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/orders", response_model=PaymentOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order_endpoint(
    order_data: PaymentOrderCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Open a 15 minute payment order. Inventory is not held until verification."""
    return await payment_service.create_payment_order(db, user, order_data)


@router.get("/orders/{order_ref}", response_model=PaymentOrderResponse)
async def get_order_endpoint(
    order_ref: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await payment_service.get_payment_order(db, user, order_ref)


@router.post("/orders/{order_ref}/verify", response_model=PaymentVerifyResponse)
async def verify_order_endpoint(
    order_ref: str,
    data: PaymentVerify,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Confirm payment and create the booking in one transaction."""
    booking = await payment_service.verify_payment(db, user, order_ref, data.external_payment_id)
    # Attendee counts changed
    await invalidate_event_cache()
    return PaymentVerifyResponse(booking=BookingResponse.model_validate(booking))


@router.post("/orders/{order_ref}/fail", response_model=PaymentOrderResponse)
async def fail_order_endpoint(
    order_ref: str,
    data: PaymentFailure,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await payment_service.handle_payment_failure(db, order_ref, data.reason, user=user)


@router.post("/orders/{order_ref}/cancel", response_model=PaymentOrderResponse)
async def cancel_order_endpoint(
    order_ref: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await payment_service.cancel_payment_order(db, user, order_ref)
