"""
Tests for court bookings, player cancellation and slot waitlists.
"""

import pytest
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from httpx import AsyncClient

from eventhive.core.clock import ensure_utc
from eventhive.core.exceptions import ConflictError, UnavailableError
from eventhive.models import CourtBooking, TimeSlot
from eventhive.services.court_booking_service import book_time_slot, cancel_player_booking, slot_price


async def _add_slot(db, court, start: datetime, minutes: int = 60, price=None) -> TimeSlot:
    slot = TimeSlot(
        court_id=court.id,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        price=price,
        is_maintenance_blocked=False,
    )
    db.add(slot)
    await db.commit()
    await db.refresh(slot)
    return slot


# ---------------------------------------------------------------------------
# Booking
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_book_slot(client: AsyncClient, auth_headers, test_slot):
    response = await client.post("/api/bookings", json={"time_slot_id": test_slot.id}, headers=auth_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "CONFIRMED"
    assert data["time_slot_id"] == test_slot.id
    assert data["total_price"] == 400.0

    slot = (await client.get(f"/api/time-slots/{test_slot.id}")).json()
    assert slot["status"] == "BOOKED"


@pytest.mark.asyncio
async def test_book_slot_unauthenticated(client: AsyncClient, test_slot):
    response = await client.post("/api/bookings", json={"time_slot_id": test_slot.id})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_second_booking_conflicts(client: AsyncClient, auth_headers, other_headers, test_slot):
    first = await client.post("/api/bookings", json={"time_slot_id": test_slot.id}, headers=auth_headers)
    assert first.status_code == 201

    second = await client.post("/api/bookings", json={"time_slot_id": test_slot.id}, headers=other_headers)
    assert second.status_code == 409
    assert second.json()["error"] == "Time slot is already booked"


@pytest.mark.asyncio
async def test_book_missing_slot(client: AsyncClient, auth_headers):
    response = await client.post("/api/bookings", json={"time_slot_id": 4242}, headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_book_maintenance_slot(client: AsyncClient, db_session, auth_headers, test_slot):
    test_slot.is_maintenance_blocked = True
    await db_session.commit()

    response = await client.post("/api/bookings", json={"time_slot_id": test_slot.id}, headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "unavailable"


@pytest.mark.asyncio
async def test_book_past_slot(db_session, test_user, test_court):
    slot = await _add_slot(db_session, test_court, datetime.now(timezone.utc) - timedelta(hours=2))
    with pytest.raises(UnavailableError, match="past"):
        await book_time_slot(db_session, test_user, slot.id)


@pytest.mark.asyncio
async def test_book_inactive_court(db_session, test_user, test_court, test_slot):
    test_court.is_active = False
    await db_session.commit()
    with pytest.raises(UnavailableError, match="Court is not active"):
        await book_time_slot(db_session, test_user, test_slot.id)


@pytest.mark.asyncio
async def test_book_unapproved_facility(db_session, test_user, test_facility, test_slot):
    test_facility.status = "PENDING"
    await db_session.commit()
    with pytest.raises(UnavailableError, match="not approved"):
        await book_time_slot(db_session, test_user, test_slot.id)


@pytest.mark.asyncio
async def test_slot_price(db_session, test_court):
    start = datetime(2030, 5, 1, 10, 0, tzinfo=timezone.utc)
    ninety = await _add_slot(db_session, test_court, start, minutes=90)
    assert slot_price(ninety, test_court) == Decimal("600.00")

    custom = await _add_slot(db_session, test_court, start + timedelta(hours=3), price=Decimal("250.00"))
    assert slot_price(custom, test_court) == Decimal("250.00")


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cancel_booking(client: AsyncClient, auth_headers, other_headers, test_slot):
    booking = (await client.post("/api/bookings", json={"time_slot_id": test_slot.id}, headers=auth_headers)).json()

    forbidden = await client.patch(f"/api/bookings/{booking['id']}/cancel", headers=other_headers)
    assert forbidden.status_code == 403

    response = await client.patch(
        f"/api/bookings/{booking['id']}/cancel", json={"reason": "Rain"}, headers=auth_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Booking cancelled successfully"
    assert data["booking"]["status"] == "CANCELLED"
    assert data["booking"]["cancellation_reason"] == "Rain"
    assert data["booking"]["cancelled_at"] is not None

    again = await client.patch(f"/api/bookings/{booking['id']}/cancel", headers=auth_headers)
    assert again.status_code == 409
    assert again.json()["error"] == "Booking is already cancelled"


@pytest.mark.asyncio
async def test_cancelled_slot_can_be_booked_again(client: AsyncClient, auth_headers, other_headers, test_slot):
    booking = (await client.post("/api/bookings", json={"time_slot_id": test_slot.id}, headers=auth_headers)).json()
    await client.patch(f"/api/bookings/{booking['id']}/cancel", headers=auth_headers)

    rebooked = await client.post("/api/bookings", json={"time_slot_id": test_slot.id}, headers=other_headers)
    assert rebooked.status_code == 201

    slot = (await client.get(f"/api/time-slots/{test_slot.id}")).json()
    assert slot["status"] == "BOOKED"


@pytest.mark.asyncio
async def test_cancel_cutoff_29_then_31_minutes(db_session, test_user, test_slot):
    booking = await book_time_slot(db_session, test_user, test_slot.id)
    start = ensure_utc(test_slot.start_time)

    with pytest.raises(ConflictError, match="less than 30 minutes before start time"):
        await cancel_player_booking(db_session, test_user, booking.id, now=start - timedelta(minutes=29))
    await db_session.refresh(booking)
    assert booking.status == "CONFIRMED"

    cancelled = await cancel_player_booking(db_session, test_user, booking.id, now=start - timedelta(minutes=31))
    assert cancelled.status == "CANCELLED"
    assert cancelled.cancellation_reason == "Cancelled by player"


@pytest.mark.asyncio
async def test_cancel_exactly_at_cutoff(db_session, test_user, test_slot):
    booking = await book_time_slot(db_session, test_user, test_slot.id)
    start = ensure_utc(test_slot.start_time)

    cancelled = await cancel_player_booking(db_session, test_user, booking.id, now=start - timedelta(minutes=30))
    assert cancelled.status == "CANCELLED"


@pytest.mark.asyncio
async def test_cancel_completed_booking(db_session, test_user, test_slot):
    booking = CourtBooking(
        time_slot_id=test_slot.id,
        court_id=test_slot.court_id,
        player_id=test_user.id,
        total_price=Decimal("400.00"),
        status="COMPLETED",
    )
    db_session.add(booking)
    await db_session.commit()

    with pytest.raises(ConflictError, match="Cannot cancel completed booking"):
        await cancel_player_booking(db_session, test_user, booking.id)


@pytest.mark.asyncio
async def test_profile_bookings_totals(client: AsyncClient, db_session, auth_headers, test_court, test_slot):
    second = await _add_slot(db_session, test_court, ensure_utc(test_slot.start_time) + timedelta(hours=1))
    first_booking = (await client.post("/api/bookings", json={"time_slot_id": test_slot.id}, headers=auth_headers)).json()
    await client.post("/api/bookings", json={"time_slot_id": second.id}, headers=auth_headers)
    await client.patch(f"/api/bookings/{first_booking['id']}/cancel", headers=auth_headers)

    response = await client.get("/api/profile/bookings", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    # Newest slot first
    assert [b["time_slot_id"] for b in data["bookings"]] == [second.id, test_slot.id]
    assert data["totals"] == {
        "total_bookings": 2,
        "active_bookings": 1,
        "completed_bookings": 0,
        "cancelled_bookings": 1,
        "total_spent": 400.0,
    }


# ---------------------------------------------------------------------------
# Waitlist
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_waitlist_only_for_unavailable_slots(client: AsyncClient, auth_headers, test_slot):
    response = await client.post(f"/api/time-slots/{test_slot.id}/waitlist", headers=auth_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_waitlist_flow(client: AsyncClient, auth_headers, other_headers, other_user, test_slot):
    await client.post("/api/bookings", json={"time_slot_id": test_slot.id}, headers=auth_headers)

    own = await client.post(f"/api/time-slots/{test_slot.id}/waitlist", headers=auth_headers)
    assert own.status_code == 409

    joined = await client.post(f"/api/time-slots/{test_slot.id}/waitlist", headers=other_headers)
    assert joined.status_code == 201
    assert joined.json()["player_id"] == other_user.id

    duplicate = await client.post(f"/api/time-slots/{test_slot.id}/waitlist", headers=other_headers)
    assert duplicate.status_code == 409

    slot = (await client.get(f"/api/time-slots/{test_slot.id}")).json()
    assert slot["waitlist_count"] == 1

    left = await client.delete(f"/api/time-slots/{test_slot.id}/waitlist", headers=other_headers)
    assert left.status_code == 200
    missing = await client.delete(f"/api/time-slots/{test_slot.id}/waitlist", headers=other_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_booking_removes_own_waitlist_entry(client: AsyncClient, auth_headers, other_headers, test_slot):
    booking = (await client.post("/api/bookings", json={"time_slot_id": test_slot.id}, headers=auth_headers)).json()
    await client.post(f"/api/time-slots/{test_slot.id}/waitlist", headers=other_headers)

    await client.patch(f"/api/bookings/{booking['id']}/cancel", headers=auth_headers)
    rebooked = await client.post("/api/bookings", json={"time_slot_id": test_slot.id}, headers=other_headers)
    assert rebooked.status_code == 201

    slot = (await client.get(f"/api/time-slots/{test_slot.id}")).json()
    assert slot["waitlist_count"] == 0
