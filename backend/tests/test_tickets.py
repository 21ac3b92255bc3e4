"""
Tests for the ticket inventory ledger.
"""

import pytest
from datetime import datetime, timezone, timedelta
from httpx import AsyncClient

from eventhive.core.clock import ensure_utc
from eventhive.core.exceptions import UnavailableError, ValidationError
from eventhive.services.ticket_service import ensure_purchasable


@pytest.mark.asyncio
async def test_create_ticket(client: AsyncClient, owner_headers, test_event):
    response = await client.post(
        f"/api/events/{test_event.id}/tickets",
        json={"name": "Early Bird", "ticket_type": "EARLY_BIRD", "price": "299.00", "quantity": 50, "max_per_user": 2},
        headers=owner_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["quantity"] == 50
    assert data["available_quantity"] == 50
    assert data["sold_quantity"] == 0
    assert data["price"] == 299.0
    assert data["currency"] == "INR"


@pytest.mark.asyncio
async def test_create_ticket_requires_organizer(client: AsyncClient, auth_headers, test_event):
    response = await client.post(
        f"/api/events/{test_event.id}/tickets",
        json={"name": "Pirate", "price": "1.00", "quantity": 5},
        headers=auth_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_ticket_invalid_limits(client: AsyncClient, owner_headers, test_event):
    response = await client.post(
        f"/api/events/{test_event.id}/tickets",
        json={"name": "Group", "price": "100.00", "quantity": 5, "min_per_user": 4, "max_per_user": 2},
        headers=owner_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_event_tickets(client: AsyncClient, test_ticket, test_event):
    response = await client.get(f"/api/events/{test_event.id}/tickets")
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [test_ticket.id]


@pytest.mark.asyncio
async def test_update_ticket(client: AsyncClient, owner_headers, test_ticket):
    response = await client.patch(
        f"/api/tickets/{test_ticket.id}",
        json={"name": "Standing", "price": "450.00"},
        headers=owner_headers,
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Standing"
    assert response.json()["price"] == 450.0


@pytest.mark.asyncio
async def test_update_ticket_rejects_inverted_limits(client: AsyncClient, owner_headers, test_ticket):
    response = await client.patch(
        f"/api/tickets/{test_ticket.id}",
        json={"min_per_user": 6},
        headers=owner_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_toggle_ticket_status(client: AsyncClient, owner_headers, test_ticket):
    response = await client.post(f"/api/tickets/{test_ticket.id}/toggle", headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    listing = await client.get(f"/api/events/{test_ticket.event_id}/tickets?active_only=true")
    assert listing.json() == []


@pytest.mark.asyncio
async def test_update_quantity_keeps_ledger_balanced(client: AsyncClient, db_session, owner_headers, test_ticket):
    test_ticket.sold_quantity = 3
    test_ticket.available_quantity = 7
    await db_session.commit()

    response = await client.patch(
        f"/api/tickets/{test_ticket.id}/quantity", json={"quantity": 20}, headers=owner_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert data["quantity"] == 20
    assert data["sold_quantity"] == 3
    assert data["available_quantity"] == 17


@pytest.mark.asyncio
async def test_update_quantity_below_sold_rejected(client: AsyncClient, db_session, owner_headers, test_ticket):
    test_ticket.sold_quantity = 3
    test_ticket.available_quantity = 7
    await db_session.commit()

    response = await client.patch(
        f"/api/tickets/{test_ticket.id}/quantity", json={"quantity": 2}, headers=owner_headers
    )
    assert response.status_code == 400
    assert "already sold (3)" in response.json()["error"]


@pytest.mark.asyncio
async def test_delete_ticket(client: AsyncClient, owner_headers, test_ticket):
    response = await client.delete(f"/api/tickets/{test_ticket.id}", headers=owner_headers)
    assert response.status_code == 200

    missing = await client.patch(f"/api/tickets/{test_ticket.id}", json={"name": "x"}, headers=owner_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_ticket_with_orders_refused(client: AsyncClient, auth_headers, owner_headers, test_ticket, test_event):
    order = await client.post(
        "/api/payments/orders",
        json={"event_id": test_event.id, "ticket_id": test_ticket.id, "quantity": 1},
        headers=auth_headers,
    )
    assert order.status_code == 201

    response = await client.delete(f"/api/tickets/{test_ticket.id}", headers=owner_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_ticket_stats(client: AsyncClient, db_session, owner_headers, test_ticket, test_event):
    test_ticket.sold_quantity = 4
    test_ticket.available_quantity = 6
    await db_session.commit()

    response = await client.get(f"/api/events/{test_event.id}/tickets/stats", headers=owner_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total_tickets"] == 10
    assert data["sold_tickets"] == 4
    assert data["available_tickets"] == 6
    assert data["total_revenue"] == 0.0


@pytest.mark.asyncio
async def test_ensure_purchasable_rules(test_ticket, test_event):
    now = datetime.now(timezone.utc)
    ensure_purchasable(test_ticket, test_event, 2, now)

    with pytest.raises(ValidationError, match="Maximum 4 tickets per user allowed"):
        ensure_purchasable(test_ticket, test_event, 5, now)

    test_ticket.sale_start_date = now + timedelta(days=1)
    with pytest.raises(UnavailableError, match="not started"):
        ensure_purchasable(test_ticket, test_event, 1, now)
    test_ticket.sale_start_date = None

    test_ticket.available_quantity = 1
    with pytest.raises(UnavailableError, match="Not enough tickets available"):
        ensure_purchasable(test_ticket, test_event, 2, now)

    with pytest.raises(UnavailableError, match="already started"):
        ensure_purchasable(test_ticket, test_event, 1, ensure_utc(test_event.start_date) + timedelta(minutes=1))
