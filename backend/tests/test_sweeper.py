"""
Tests for the expiration sweeper of unconfirmed payment orders.
"""

import pytest
from datetime import datetime, timezone, timedelta
from httpx import AsyncClient

from eventhive.schemas.payment import PaymentOrderCreate
from eventhive.services.payment_service import create_payment_order, verify_payment
from eventhive.services.reservation_sweeper import cleanup_expired_reservations


def _order(ticket, quantity: int = 1) -> PaymentOrderCreate:
    return PaymentOrderCreate(event_id=ticket.event_id, ticket_id=ticket.id, quantity=quantity)


@pytest.mark.asyncio
async def test_expired_order_cancelled_and_ticket_untouched(db_session, test_user, last_unit_ticket):
    order = await create_payment_order(db_session, test_user, _order(last_unit_ticket))
    order.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    await db_session.commit()

    cancelled = await cleanup_expired_reservations(db_session)
    assert cancelled == 1

    await db_session.refresh(order)
    await db_session.refresh(last_unit_ticket)
    assert order.status == "CANCELLED"
    assert last_unit_ticket.sold_quantity == 0
    assert last_unit_ticket.available_quantity == 1


@pytest.mark.asyncio
async def test_sweep_leaves_open_and_terminal_orders_alone(db_session, test_user, other_user, test_ticket):
    now = datetime.now(timezone.utc)
    open_order = await create_payment_order(db_session, test_user, _order(test_ticket))
    paid = await create_payment_order(db_session, other_user, _order(test_ticket))
    await verify_payment(db_session, other_user, paid.order_ref, "pay_ok")

    # Sweep as if an hour had passed: only PENDING orders are touched
    cancelled = await cleanup_expired_reservations(db_session, now=now + timedelta(hours=1))
    assert cancelled == 1

    await db_session.refresh(open_order)
    await db_session.refresh(paid)
    assert open_order.status == "CANCELLED"
    assert paid.status == "SUCCESSFUL"


@pytest.mark.asyncio
async def test_sweep_is_repeatable(db_session, test_user, test_ticket):
    now = datetime.now(timezone.utc)
    await create_payment_order(db_session, test_user, _order(test_ticket))

    assert await cleanup_expired_reservations(db_session, now=now) == 0
    assert await cleanup_expired_reservations(db_session, now=now + timedelta(minutes=16)) == 1
    assert await cleanup_expired_reservations(db_session, now=now + timedelta(minutes=16)) == 0


@pytest.mark.asyncio
async def test_admin_cleanup_endpoint(client: AsyncClient, db_session, admin_headers, auth_headers, test_user, test_ticket):
    order = await create_payment_order(db_session, test_user, _order(test_ticket))
    order.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    await db_session.commit()

    forbidden = await client.post("/api/admin/reservations/cleanup", headers=auth_headers)
    assert forbidden.status_code == 403

    response = await client.post("/api/admin/reservations/cleanup", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"cancelled": 1}
