"""
Expiration sweeper for payment orders that were never confirmed.

Orders never held inventory, so expiring them is a single status flip with no
ledger adjustment. The UPDATE is conditional on status = 'PENDING': an order
that is verified while the sweep runs keeps its SUCCESSFUL status.
"""

import asyncio
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventhive.models.enums import PaymentOrderStatus
from eventhive.models.payment import PaymentOrder
from eventhive.core.clock import utcnow
from eventhive.core.logging import get_logger
from eventhive.core.metrics import reservations_expired

logger = get_logger(__name__)


async def cleanup_expired_reservations(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Cancel every PENDING order whose deadline has passed. Returns the count."""
    now = now or utcnow()
    result = await db.execute(
        update(PaymentOrder)
        .where(
            PaymentOrder.status == PaymentOrderStatus.PENDING.value,
            PaymentOrder.expires_at < now,
        )
        .values(status=PaymentOrderStatus.CANCELLED.value)
        .execution_options(synchronize_session=False)
    )
    cancelled = result.rowcount or 0

    if cancelled:
        reservations_expired.inc(cancelled)
        logger.info("reservations_expired", count=cancelled)
    return cancelled


async def run_reservation_sweeper(session_factory: async_sessionmaker, interval_seconds: int) -> None:
    """
    Background loop started from the application lifespan.
    One transaction per sweep; a failed sweep is logged and retried on the next tick.
    """
    logger.info("reservation_sweeper_started", interval_seconds=interval_seconds)
    while True:
        try:
            async with session_factory() as session:
                async with session.begin():
                    await cleanup_expired_reservations(session)
        except Exception:
            logger.exception("reservation_sweep_failed")
        await asyncio.sleep(interval_seconds)
