"""
Tests for event endpoints: creation, publishing and filtered listings.
"""

import pytest
from datetime import datetime, timezone, timedelta
from httpx import AsyncClient

from eventhive.models.event import Event
from eventhive.schemas.event import EventFilters
from eventhive.services.event_service import build_event_predicates, list_events


def _event_payload(**overrides) -> dict:
    start = datetime.now(timezone.utc) + timedelta(days=30)
    payload = {
        "title": "Python Conference 2026",
        "description": "Annual Python gathering",
        "category": "TECHNOLOGY",
        "city": "Bengaluru",
        "location": "Convention Center",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(hours=8)).isoformat(),
        "max_attendees": 500,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_event(client: AsyncClient, owner_headers):
    """New events start as DRAFT with nobody attending."""
    response = await client.post("/api/events", json=_event_payload(), headers=owner_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Python Conference 2026"
    assert data["status"] == "DRAFT"
    assert data["max_attendees"] == 500
    assert data["current_attendees"] == 0


@pytest.mark.asyncio
async def test_create_event_unauthenticated(client: AsyncClient):
    """Unauthenticated request returns 401."""
    response = await client.post("/api/events", json=_event_payload())
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_event_past_date(client: AsyncClient, owner_headers):
    """Event starting in the past returns 400."""
    start = datetime.now(timezone.utc) - timedelta(days=1)
    response = await client.post(
        "/api/events",
        json=_event_payload(start_date=start.isoformat(), end_date=(start + timedelta(hours=2)).isoformat()),
        headers=owner_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_event_invalid_capacity(client: AsyncClient, owner_headers):
    """Zero capacity returns 422."""
    response = await client.post("/api/events", json=_event_payload(max_attendees=0), headers=owner_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_publish_event(client: AsyncClient, owner_headers, auth_headers):
    created = (await client.post("/api/events", json=_event_payload(), headers=owner_headers)).json()

    # Drafts never show up in the public listing
    listing = (await client.get("/api/events")).json()
    assert created["id"] not in [e["id"] for e in listing["events"]]

    forbidden = await client.post(f"/api/events/{created['id']}/publish", headers=auth_headers)
    assert forbidden.status_code == 403

    response = await client.post(f"/api/events/{created['id']}/publish", headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "PUBLISHED"
    assert response.json()["published_at"] is not None

    again = await client.post(f"/api/events/{created['id']}/publish", headers=owner_headers)
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_list_events(client: AsyncClient, test_event):
    """List events returns paginated results."""
    response = await client.get("/api/events")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["events"][0]["id"] == test_event.id
    assert data["page"] == 1
    assert data["cached"] is False


@pytest.mark.asyncio
async def test_list_events_pagination(client: AsyncClient, test_event):
    """Pagination parameters work correctly."""
    response = await client.get("/api/events?page=2&page_size=5")
    assert response.status_code == 200
    data = response.json()
    assert data["page_size"] == 5
    assert data["total"] == 1
    assert data["events"] == []


@pytest.mark.asyncio
async def test_list_events_filters(client: AsyncClient, test_event):
    assert (await client.get("/api/events?category=MUSIC")).json()["total"] == 1
    assert (await client.get("/api/events?category=SPORTS")).json()["total"] == 0
    assert (await client.get("/api/events?city=pune")).json()["total"] == 1
    assert (await client.get("/api/events?search=concert")).json()["total"] == 1
    assert (await client.get("/api/events?search=opera")).json()["total"] == 0
    assert (await client.get("/api/events?status=DRAFT")).json()["total"] == 0


@pytest.mark.asyncio
async def test_listing_orders_featured_first(db_session, owner, test_event):
    start = datetime.now(timezone.utc) + timedelta(days=60)
    featured = Event(
        title="Featured Later Show",
        category="MUSIC",
        status="PUBLISHED",
        start_date=start,
        end_date=start + timedelta(hours=2),
        max_attendees=50,
        current_attendees=0,
        featured=True,
        organizer_id=owner.id,
    )
    db_session.add(featured)
    await db_session.commit()

    events, total = await list_events(db_session, EventFilters())
    assert total == 2
    assert [e.id for e in events] == [featured.id, test_event.id]


def test_build_event_predicates_defaults_to_published():
    assert len(build_event_predicates(EventFilters())) == 1
    filters = EventFilters(search="jazz", category="MUSIC", featured=True)
    assert len(build_event_predicates(filters)) == 4


def test_filter_cache_key_is_stable():
    a = EventFilters(city="Pune", category="MUSIC")
    b = EventFilters(category="MUSIC", city="Pune")
    assert a.cache_key() == b.cache_key() == "category=MUSIC&city=Pune"


@pytest.mark.asyncio
async def test_list_categories(client: AsyncClient, test_event):
    response = await client.get("/api/events/categories")
    assert response.status_code == 200
    assert response.json() == [{"category": "MUSIC", "count": 1}]


@pytest.mark.asyncio
async def test_get_event(client: AsyncClient, test_event):
    """Get single event by ID."""
    response = await client.get(f"/api/events/{test_event.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == test_event.id
    assert data["title"] == "Test Concert"


@pytest.mark.asyncio
async def test_get_event_not_found(client: AsyncClient):
    """Non-existent event returns 404."""
    response = await client.get("/api/events/99999")
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"
